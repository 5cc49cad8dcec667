import gzip

import pytest

from oligo_count.io import (FastqFormatError, FastqReader, discover_fastq_files,
                            is_fastq_path)


@pytest.mark.parametrize(["name", "expected"], (
    ("a.fastq", True),
    ("a.fq", True),
    ("a.fastq.gz", True),
    ("A.FQ.GZ", True),
    ("a.fasta", False),
    ("a.gz", False),
    ("a.txt.gz", False),
    ("fastq", False),
))
def test_is_fastq_path(name, expected):
    assert is_fastq_path(name) == expected


def test_reader_yields_records(tmp_path):
    path = tmp_path / "r.fastq"
    path.write_text("@r1 extra\nACGT\n+\nIIII\n\n@r2\nacg\n+r2\nII#\n")
    with FastqReader(path) as reader:
        records = list(reader)
    assert records == [("r1 extra", "ACGT", "IIII"), ("r2", "acg", "II#")]


def test_reader_crlf_line_endings(tmp_path):
    path = tmp_path / "r.fastq"
    path.write_bytes(b"@r1 1:N:0\r\nACGT\r\n+\r\nIIII\r\n")
    with FastqReader(path) as reader:
        assert list(reader) == [("r1 1:N:0", "ACGT", "IIII")]


def test_reader_gzip_with_concatenated_members(tmp_path):
    path = tmp_path / "r.fastq.gz"
    path.write_bytes(gzip.compress(b"@a\nAAAA\n+\nIIII\n") +
                     gzip.compress(b"@b\nCCCC\n+\nIIII\n"))
    with FastqReader(path) as reader:
        assert list(reader.sequences()) == ["AAAA", "CCCC"]


def test_empty_file(tmp_path):
    path = tmp_path / "empty.fq"
    path.write_text("")
    with FastqReader(path) as reader:
        assert list(reader) == []


@pytest.mark.parametrize(["text", "message"], (
    ("ACGT\nACGT\n+\nIIII\n", "header"),
    ("@r\nACGT\n-\nIIII\n", "separator"),
    ("@r\nACGT\n+\n", "truncated"),
    ("@r\nACGT\n+\nIII\n", "lengths differ"),
))
def test_malformed_records(tmp_path, text, message):
    path = tmp_path / "bad.fastq"
    path.write_text(text)
    with FastqReader(path) as reader:
        with pytest.raises(FastqFormatError, match=message) as excinfo:
            list(reader)
    assert "bad.fastq" in str(excinfo.value)
    assert "record 1" in str(excinfo.value)


def test_corrupt_gzip(tmp_path):
    path = tmp_path / "bad.fastq.gz"
    data = gzip.compress(b"@a\nAAAA\n+\nIIII\n" * 100)
    path.write_bytes(data[:len(data) // 2])
    with FastqReader(path) as reader:
        with pytest.raises(FastqFormatError, match="bad.fastq.gz"):
            list(reader)


def test_not_gzip_at_all(tmp_path):
    path = tmp_path / "fake.fastq.gz"
    path.write_text("@a\nAAAA\n+\nIIII\n")
    with FastqReader(path) as reader:
        with pytest.raises(FastqFormatError):
            list(reader)


def test_discover_fastq_files(tmp_path):
    for name in ("b.fq.gz", "a.fastq", "c.txt", "d.fasta"):
        (tmp_path / name).write_text("")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "e.fq").write_text("")

    assert [p.name for p in discover_fastq_files(tmp_path)] == ["a.fastq", "b.fq.gz"]
    assert [p.name for p in discover_fastq_files(tmp_path, recursive=True)] == \
        ["a.fastq", "b.fq.gz", "e.fq"]


def test_discover_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        discover_fastq_files(tmp_path / "missing")


def test_missing_file(tmp_path):
    with pytest.raises(FastqFormatError, match="missing.fastq"):
        FastqReader(tmp_path / "missing.fastq")
