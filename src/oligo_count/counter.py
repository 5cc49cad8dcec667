# oligo_count/counter.py
"""
Per-file aggregation of query matches.

For every read of a file, every registered query is tested with `matches`;
counts are accumulated in the registry, turned into a `FileReport` when the
file is exhausted, and reset before the next file starts.
"""

import os
import time
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from oligo_count.io import FastqFormatError, FastqReader
from oligo_count.logic import matches, normalize_sequence
from oligo_count.registry import QueryRegistry

ReportRow = Tuple[str, str, int, float]

SEPARATOR = "-" * 35

REPORT_COLUMNS = ["file", "total_reads", "mismatch_fraction",
                  "name", "sequence", "count", "percentage"]

# FastqReader reports open, decode and framing failures as FastqFormatError;
# anything else (e.g. from a callback) is not a stream error
FILE_ERRORS = (FastqFormatError,)


def percentage(count: int, total_reads: int) -> float:
    """Percent of reads matched; 0.0 for a file without reads."""
    if total_reads == 0:
        return 0.0
    return 100.0 * count / total_reads


class FileReport:
    """
    Counts for one input file.

    Attributes:
        file_name (str): Name shown in the report.
        total_reads (int): Number of reads in the file.
        mismatch_fraction (float): Mismatch fraction the file was counted with.
        rows (List[ReportRow]): (name, sequence, count, percentage) in query order.
        elapsed (float or None): Seconds spent on the file, when measured.
    """

    def __init__(self, file_name: str, total_reads: int, mismatch_fraction: float,
                 rows: List[ReportRow], elapsed: Optional[float] = None) -> None:
        self.file_name = file_name
        self.total_reads = total_reads
        self.mismatch_fraction = mismatch_fraction
        self.rows = rows
        self.elapsed = elapsed

    @classmethod
    def from_registry(cls, file_name: str, total_reads: int, mismatch_fraction: float,
                      registry: QueryRegistry) -> "FileReport":
        rows = [(name, sequence, count, percentage(count, total_reads))
                for name, sequence, count in registry.snapshot_in_order()]
        return cls(file_name, total_reads, mismatch_fraction, rows)

    def counts(self) -> Dict[str, int]:
        return {name: count for name, _, count, _ in self.rows}

    def percentage_for(self, name: str) -> float:
        for row_name, _, _, pct in self.rows:
            if row_name == name:
                return pct
        raise KeyError(name)

    def to_frame(self) -> pd.DataFrame:
        """One row per query, in report order."""
        return pd.DataFrame(
            [(self.file_name, self.total_reads, self.mismatch_fraction, *row)
             for row in self.rows],
            columns=REPORT_COLUMNS,
        )

    def __str__(self) -> str:
        return format_report(self)

    def __repr__(self) -> str:
        return (f"FileReport({self.file_name!r}, total_reads={self.total_reads}, "
                f"queries={len(self.rows)})")


def format_report(report: FileReport) -> str:
    """Renders a report as the text block printed after each file."""
    lines = [
        SEPARATOR,
        "",
        f"Results for file: {report.file_name}",
        f"Total reads: {report.total_reads}, "
        f"Mismatch allowance: {report.mismatch_fraction:.2f}",
        "",
        "Name, Sequence, Count, Percentage",
    ]
    for name, sequence, count, pct in report.rows:
        lines.append(f"{name}, {sequence}, {count}, {pct:.2f}%")
    if report.elapsed is not None:
        lines.append("")
        lines.append(f"Time taken for {report.file_name}: {report.elapsed:.2f}s")
    return "\n".join(lines)


def reports_to_frame(reports: Iterable[FileReport]) -> pd.DataFrame:
    """Long-format table of several reports, one row per (file, query)."""
    frames = [report.to_frame() for report in reports]
    if not frames:
        return pd.DataFrame(columns=REPORT_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def count_reads(
    reads: Iterable[str],
    registry: QueryRegistry,
    mismatch_fraction: float,
    file_name: str = "<reads>",
    *,
    on_read: Optional[Callable[[str], Any]] = None
) -> FileReport:
    """
    Count, for every query in `registry`, the reads of one file that contain it.

    A read may match any number of queries. Counts are reset once the report
    has been built, and also when `reads` raises, so nothing carries over into
    the next file.

    Args:
        reads: Read sequences of one file, not yet normalized.
        registry: Queries to count; its counts must be zero on entry.
        mismatch_fraction: Allowed mismatch fraction for every query.
        file_name: Name used in the report.
        on_read: Optional callback receiving each normalized read.

    Returns:
        FileReport for the file.
    """
    total_reads = 0
    entries = [entry for _, entry in registry.items()]
    try:
        for read in reads:
            read = normalize_sequence(read)
            total_reads += 1
            if on_read is not None:
                on_read(read)
            for entry in entries:
                if matches(read, entry.sequence, mismatch_fraction):
                    registry.increment(entry.name)
        return FileReport.from_registry(file_name, total_reads, mismatch_fraction, registry)
    finally:
        registry.reset_all()


def count_file(
    path,
    registry: QueryRegistry,
    mismatch_fraction: float,
    *,
    on_read: Optional[Callable[[str], Any]] = None
) -> FileReport:
    """
    Counts query matches in one FASTQ file (plain or gzipped).

    Raises:
        FastqFormatError: If the file cannot be opened, decoded or is not valid FASTQ.
    """
    start = time.perf_counter()
    with FastqReader(path) as reader:
        report = count_reads(reader.sequences(), registry, mismatch_fraction,
                             os.path.basename(os.fspath(path)), on_read=on_read)
    report.elapsed = time.perf_counter() - start
    return report


def _count_file_worker(path, pairs: List[Tuple[str, str]], mismatch_fraction: float) -> FileReport:
    # each worker process gets its own registry, so counts are never shared
    return count_file(path, QueryRegistry(pairs), mismatch_fraction)


def count_files(
    paths: Iterable,
    registry: QueryRegistry,
    mismatch_fraction: float,
    *,
    workers: int = 1,
    on_start: Optional[Callable[[Any], Any]] = None,
    on_error: Optional[Callable[[Any, Exception], Any]] = None,
    on_read: Optional[Callable[[str], Any]] = None
) -> Iterator[FileReport]:
    """
    Yields one FileReport per path, in the order the paths were given.

    With workers > 1 files are counted in separate processes, each against a
    private copy of the registry; the reports are identical to a sequential
    run. `on_read` is only supported when workers == 1.

    Args:
        paths: FASTQ files to process.
        registry: Queries to count.
        mismatch_fraction: Allowed mismatch fraction.
        workers: Number of worker processes.
        on_start: Called with each path before its report is produced.
        on_error: Called with (path, exception) when a file fails to read;
            the file is then skipped. Without it, the error propagates.
        on_read: Per-read callback, see `count_reads`.
    """
    paths = list(paths)
    if workers <= 1:
        for path in paths:
            if on_start is not None:
                on_start(path)
            try:
                yield count_file(path, registry, mismatch_fraction, on_read=on_read)
            except FILE_ERRORS as e:
                if on_error is None:
                    raise
                on_error(path, e)
        return

    if on_read is not None:
        raise ValueError("on_read is not supported with more than one worker")

    pairs = [(name, sequence) for name, sequence, _ in registry.snapshot_in_order()]
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_count_file_worker, path, pairs, mismatch_fraction)
                   for path in paths]
        for path, future in zip(paths, futures):
            if on_start is not None:
                on_start(path)
            try:
                yield future.result()
            except FILE_ERRORS as e:
                if on_error is None:
                    for pending in futures:
                        pending.cancel()
                    raise
                on_error(path, e)
