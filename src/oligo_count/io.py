import gzip
import os
import zlib
from pathlib import Path
from typing import IO, Iterator, List, Tuple, Union

# IO module for oligo_count

FASTQ_SUFFIXES = (".fastq", ".fq", ".fastq.gz", ".fq.gz")

# decode failures from gzip, zlib or the text layer
READ_ERRORS = (OSError, EOFError, UnicodeDecodeError, zlib.error)

PathLike = Union[str, "os.PathLike[str]"]


class FastqFormatError(RuntimeError):
    """Raised when a FASTQ file cannot be decoded or is not valid FASTQ."""


def is_fastq_path(path: PathLike) -> bool:
    """True for .fastq / .fq files, plain or gzip-compressed."""
    return os.fspath(path).lower().endswith(FASTQ_SUFFIXES)


def open_sequence_file(path: PathLike) -> IO[str]:
    """
    Opens a sequence file for text reading.

    gzip is chosen from the file name, once per file; concatenated gzip
    members are read through to the end.

    Args:
        path: Path to a plain or .gz file.

    Returns:
        A text-mode file object.
    """
    if os.fspath(path).lower().endswith(".gz"):
        return gzip.open(path, "rt")
    return open(path, "r")


def discover_fastq_files(directory: PathLike, recursive: bool = False) -> List[Path]:
    """
    Lists the FASTQ files in a directory, sorted by name.

    Args:
        directory: Directory to scan.
        recursive (bool): Also descend into sub-directories.

    Raises:
        FileNotFoundError: If `directory` does not exist or is not a directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Not a directory: {directory}")
    candidates = directory.rglob("*") if recursive else directory.iterdir()
    return sorted((p for p in candidates if p.is_file() and is_fastq_path(p)),
                  key=lambda p: (str(p.parent), p.name))


class FastqReader:
    """
    Iterator for reading single-end reads from a plain or gzipped FASTQ file.

    Yields:
        Tuple[str, str, str]: (read_id, seq, qual)
    """

    def __init__(self, filename: PathLike) -> None:
        """
        Initializes the FastqReader.

        Args:
            filename: Path to a .fastq/.fq file, optionally gzipped.

        Raises:
            FastqFormatError: If the file cannot be opened.
        """
        self.filename = os.fspath(filename)
        self.record_number = 0
        try:
            self.handle = open_sequence_file(filename)
        except OSError as e:
            raise FastqFormatError(f"{self.filename}: cannot open: {e}") from e

    def __iter__(self) -> Iterator[Tuple[str, str, str]]:
        return self

    def _next_line(self) -> str:
        return next(self.handle).rstrip("\r\n")

    def _fail(self, message: str) -> FastqFormatError:
        return FastqFormatError(
            f"{self.filename}: record {self.record_number}: {message}")

    def __next__(self) -> Tuple[str, str, str]:
        """
        Reads the next record.

        Returns:
            Tuple[str, str, str]: read_id, seq, qual

        Raises:
            StopIteration: If end of file is reached.
            FastqFormatError: On malformed records or undecodable input.
        """
        try:
            header = self._next_line()
            while not header.strip():
                header = self._next_line()
        except StopIteration:
            self.close()
            raise
        except READ_ERRORS as e:
            self.close()
            raise self._fail(f"error reading FASTQ: {e}") from e

        self.record_number += 1
        try:
            if not header.startswith("@"):
                raise self._fail(f"header line does not start with '@': {header[:50]!r}")
            seq = self._next_line().strip()
            plus = self._next_line()
            if not plus.startswith("+"):
                raise self._fail(f"separator line does not start with '+': {plus[:50]!r}")
            qual = self._next_line().strip()
            if len(qual) != len(seq):
                raise self._fail(
                    f"sequence and quality lengths differ ({len(seq)} != {len(qual)})")
        except StopIteration:
            self.close()
            raise self._fail("truncated record") from None
        except FastqFormatError:
            self.close()
            raise
        except READ_ERRORS as e:
            self.close()
            raise self._fail(f"error reading FASTQ: {e}") from e

        return header[1:], seq, qual

    def sequences(self) -> Iterator[str]:
        """Yields only the sequence of each record."""
        for _, seq, _ in self:
            yield seq

    def close(self) -> None:
        """Closes the input file."""
        self.handle.close()

    def __enter__(self):
        """Support for context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close file when exiting context."""
        self.close()
