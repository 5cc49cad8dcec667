import gzip

import pytest


def fastq_text(seqs, prefix="read"):
    """Four-line FASTQ records for the given sequences."""
    return "".join(f"@{prefix}{i}\n{seq}\n+\n{'~' * len(seq)}\n"
                   for i, seq in enumerate(seqs))


@pytest.fixture
def write_fastq(tmp_path):
    """Write sequences to tmp_path/<name>, gzipped when the name ends in .gz."""
    def _write(name, seqs):
        path = tmp_path / name
        text = fastq_text(seqs)
        if name.endswith(".gz"):
            with gzip.open(path, "wt") as f:
                f.write(text)
        else:
            path.write_text(text)
        return path
    return _write
