"""
oligo-count: count reads containing known oligonucleotide sequences,
allowing a fraction of substitution mismatches.
"""

from oligo_count.counter import FileReport, count_file, count_files, count_reads
from oligo_count.logic import matches
from oligo_count.registry import QueryRegistry

__version__ = "0.1.0"
