#!/usr/bin/env python3
"""
Command-line interface for oligo-count.

Counts, per FASTQ file, the reads that contain each query sequence within a
mismatch allowance, and prints one report per file.
"""

import argparse
import sys
from pathlib import Path

from oligo_count.counter import count_files, reports_to_frame
from oligo_count.io import discover_fastq_files, is_fastq_path
from oligo_count.logic import validate_mismatch_fraction
from oligo_count.queries import queries_from_csv, queries_from_yaml, single_query
from oligo_count.registry import QueryRegistry


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oligo_count",
        description="Count reads containing query sequences in FASTQ files, "
                    "allowing a fraction of substitution mismatches"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--seq",
        help="Single query sequence (reported under the name 'Query')"
    )
    source.add_argument(
        "--csv",
        type=Path,
        help="CSV file with a header line, then name,sequence rows"
    )
    source.add_argument(
        "--yaml",
        type=Path,
        help="YAML file with a 'queries' section (may set mismatch_fraction)"
    )
    parser.add_argument(
        "inputs",
        metavar="INPUT",
        nargs="+",
        type=Path,
        help="FASTQ file(s) or directories of .fastq/.fq files (can be gzipped)"
    )
    parser.add_argument(
        "--mismatch",
        default=None,
        help="Allowed fraction of mismatches per query, 0 to 1 "
             "(default: from the YAML file, else 0.0 = exact match)"
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Also search sub-directories of directory inputs"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of files to count in parallel (default: 1)"
    )
    parser.add_argument(
        "--on-error",
        choices=("abort", "skip"),
        default="abort",
        help="What to do when a file cannot be read (default: abort)"
    )
    parser.add_argument(
        "--summary",
        type=Path,
        help="Write all counts to this table (.csv, otherwise tab-separated)"
    )
    parser.add_argument(
        "--plot",
        type=Path,
        help="Save a bar chart of match percentages to this image file"
    )
    parser.add_argument(
        "--show-reads",
        action="store_true",
        help="Print every read sequence as it is processed"
    )
    return parser


def collect_inputs(inputs, recursive=False):
    """Expand directories into their FASTQ files; keep explicit files in order."""
    paths = []
    for path in inputs:
        if path.is_dir():
            paths.extend(discover_fastq_files(path, recursive=recursive))
        elif not path.exists():
            raise FileNotFoundError(f"Input not found: {path}")
        elif is_fastq_path(path):
            paths.append(path)
        else:
            raise ValueError(f"Not a FASTQ file (.fastq, .fq, optionally .gz): {path}")
    return paths


def main(argv=None):
    """Main CLI entry point."""
    args = build_arg_parser().parse_args(argv)

    if args.workers < 1:
        sys.exit("Error: --workers must be at least 1")
    if args.show_reads and args.workers > 1:
        sys.exit("Error: --show-reads cannot be combined with --workers > 1")

    # Load queries and settings
    options = {}
    try:
        if args.seq is not None:
            pairs = single_query(args.seq)
        else:
            query_file = args.csv if args.csv is not None else args.yaml
            if not query_file.exists():
                sys.exit(f"Error: Query file not found: {query_file}")
            if args.yaml is not None:
                pairs, options = queries_from_yaml(query_file)
            else:
                pairs = queries_from_csv(query_file)
        registry = QueryRegistry(pairs)
    except (OSError, ValueError) as e:
        sys.exit(f"Error loading queries: {e}")

    raw_fraction = args.mismatch if args.mismatch is not None \
        else options.get("mismatch_fraction", 0.0)
    try:
        mismatch_fraction = validate_mismatch_fraction(raw_fraction)
    except ValueError as e:
        sys.exit(f"Error: {e}")

    if len(registry) == 0:
        sys.exit("Error: No query sequences given")

    try:
        paths = collect_inputs(args.inputs, recursive=args.recursive)
    except (OSError, ValueError) as e:
        sys.exit(f"Error: {e}")
    if not paths:
        sys.exit("Error: No FASTQ files found")

    def on_start(path):
        print(f"Processing file: {path.name}")

    def on_error(path, exc):
        print(f"Error processing FASTQ file {path.name}: {exc} (skipped)", file=sys.stderr)

    def on_read(read):
        print(f"Sequence: {read}")

    reports = []
    try:
        for report in count_files(
            paths,
            registry,
            mismatch_fraction,
            workers=args.workers,
            on_start=on_start,
            on_error=on_error if args.on_error == "skip" else None,
            on_read=on_read if args.show_reads else None,
        ):
            print(report)
            print()
            reports.append(report)
    except Exception as e:
        sys.exit(f"Error during processing: {e}")

    if args.summary is not None:
        sep = "," if args.summary.suffix.lower() == ".csv" else "\t"
        try:
            reports_to_frame(reports).to_csv(args.summary, sep=sep, index=False)
        except OSError as e:
            sys.exit(f"Error writing summary: {e}")
        print(f"Summary written to {args.summary}")

    if args.plot is not None:
        import matplotlib
        matplotlib.use("Agg")
        from oligo_count.plot import save_match_plot
        try:
            save_match_plot(reports, args.plot)
        except (OSError, ValueError) as e:
            sys.exit(f"Error writing plot: {e}")
        print(f"Plot written to {args.plot}")


if __name__ == "__main__":
    main()
