#!/usr/bin/env python3
"""
Count query sequences in the first reads of every library of a sequencing run
and print one table with a row per (library, query).

Usage
-----
python summarize_run.py \
    --run-dir   /path/to/Fastq \
    --queries   queries.yaml \
    --prefix    DB \
    --max-reads 10000
"""

from __future__ import annotations
import argparse, re, sys
from itertools import islice
from pathlib import Path

import pandas as pd
from oligo_count.counter import count_reads, reports_to_frame
from oligo_count.io import FastqReader
from oligo_count.logic import validate_mismatch_fraction
from oligo_count.queries import queries_from_csv, queries_from_yaml
from oligo_count.registry import QueryRegistry

# Illumina file names: <sample>_<S#>_L001_R1_001.fastq.gz
PAT = re.compile(r'^(?P<key>[^_]+_[^_]+)_L\d{3}_R(?P<read>[12])_\d{3}\.fastq\.gz$')

def discover(run_dir: Path, prefix: str, read: str = "1") -> dict[str, Path]:
    libs = {}
    for f in run_dir.glob("*.fastq.gz"):
        m = PAT.match(f.name)
        if m and m.group("read") == read and m.group("key").startswith(prefix):
            libs[m.group("key")] = f.resolve()
    return libs

def load_registry(path: Path) -> tuple[QueryRegistry, dict]:
    if path.suffix.lower() in (".yaml", ".yml"):
        pairs, options = queries_from_yaml(path)
    else:
        pairs, options = queries_from_csv(path), {}
    return QueryRegistry(pairs), options

def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--run-dir",  type=Path, required=True)
    ap.add_argument("--queries",  type=Path, required=True, help="CSV or YAML query list")
    ap.add_argument("--prefix",   default="")
    ap.add_argument("--read",     choices=("1", "2"), default="1")
    ap.add_argument("--mismatch", default=None)
    ap.add_argument("--max-reads",type=int, default=10_000)
    ap.add_argument("--out",      type=Path, help="optional TSV output")
    args = ap.parse_args(argv)

    libs = discover(args.run_dir, args.prefix, args.read)
    if not libs:
        sys.exit("No libraries found.")

    registry, options = load_registry(args.queries)
    fraction = validate_mismatch_fraction(
        args.mismatch if args.mismatch is not None else options.get("mismatch_fraction", 0.0))

    reports = []
    for key in sorted(libs):
        print(f"⇢ Counting {key}")
        with FastqReader(libs[key]) as reader:
            reads = islice(reader.sequences(), args.max_reads)
            reports.append(count_reads(reads, registry, fraction, key))

    df = reports_to_frame(reports)
    table = df.pivot(index="name", columns="file", values="percentage")
    table = table.reindex(list(registry))
    with pd.option_context("display.float_format", "{:.2f}".format):
        print(table)
    if args.out:
        df.to_csv(args.out, sep="\t", index=False)

if __name__ == "__main__":   # <-- import-safe
    main()
