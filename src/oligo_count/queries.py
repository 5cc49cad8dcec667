# oligo_count/queries.py
"""
Loading of the query list: a single ad hoc sequence, a CSV table or a YAML file.

Every loader returns an ordered list of (name, sequence) pairs; the order is
the order in which queries are reported.
"""

from collections.abc import Hashable
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd
import yaml

from oligo_count.registry import DuplicateQueryError

QueryPairs = List[Tuple[str, str]]

DEFAULT_QUERY_NAME = "Query"


def single_query(sequence: str, name: str = DEFAULT_QUERY_NAME) -> QueryPairs:
    """One query given directly on the command line."""
    return [(name, sequence)]


def queries_from_csv(path) -> QueryPairs:
    """
    Reads queries from a CSV file.

    The first line is a header and is skipped. The first column holds the
    name and the second the sequence; any further columns are ignored.

    Raises:
        ValueError: If the table has fewer than two columns or a row is blank.
    """
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True).fillna("")
    except pd.errors.EmptyDataError:
        raise ValueError(f"Query file is empty: {path}")
    except pd.errors.ParserError as e:
        raise ValueError(f"Could not parse query file {path}: {e}") from e

    if df.shape[1] < 2:
        raise ValueError(f"Query file {path} needs a name and a sequence column")

    pairs = []
    for row_no, (name, sequence) in enumerate(
            df.iloc[:, :2].itertuples(index=False, name=None), start=1):
        name, sequence = name.strip(), sequence.strip()
        if not name or not sequence:
            raise ValueError(f"{path}: row {row_no}: missing name or sequence")
        pairs.append((name, sequence))
    return pairs


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, Hashable):
                continue
            if key in seen:
                raise DuplicateQueryError(
                    f"duplicate key {key!r} on line {key_node.start_mark.line + 1}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _yaml_text(value: Any, field: str, where: str, path) -> str:
    # YAML turns blank values into None and may hand back lists or mappings
    if value is None or isinstance(value, (bool, list, dict)):
        raise ValueError(f"{path}: {where}: {field} must be a non-empty string, got {value!r}")
    text = str(value).strip()
    if not text:
        raise ValueError(f"{path}: {where}: missing {field}")
    return text


def _pairs_from_yaml_queries(queries: Any, path) -> QueryPairs:
    if isinstance(queries, dict):
        pairs = [(_yaml_text(name, "name", f"query {name!r}", path),
                  _yaml_text(seq, "sequence", f"query {name!r}", path))
                 for name, seq in queries.items()]
    elif isinstance(queries, list):
        pairs = []
        for i, item in enumerate(queries):
            if not isinstance(item, dict) or "name" not in item or "sequence" not in item:
                raise ValueError(f"{path}: query {i} must have 'name' and 'sequence'")
            where = f"query {i}"
            pairs.append((_yaml_text(item["name"], "name", where, path),
                          _yaml_text(item["sequence"], "sequence", where, path)))
    else:
        raise ValueError(f"{path}: 'queries' must be a list or a mapping")

    seen = set()
    for name, _ in pairs:
        if name in seen:
            raise DuplicateQueryError(f"{path}: duplicate query name {name!r}")
        seen.add(name)
    return pairs


def queries_from_yaml(path) -> Tuple[QueryPairs, Dict[str, Any]]:
    """
    Reads queries, and optional run settings, from a YAML file.

    Accepted layouts::

        queries:                       queries:
          - name: bc1                    bc1: ACGTACGT
            sequence: ACGTACGT           bc2: TTGACCAA
        mismatch_fraction: 0.1

    or a bare list of {name, sequence} mappings.

    Returns:
        (pairs, options) where options holds any top-level keys other than
        'queries' (e.g. 'mismatch_fraction').

    Raises:
        DuplicateQueryError: If a query name, or any mapping key, repeats.
        ValueError: If the file is not valid YAML or a name or sequence is
            blank or not a scalar.
    """
    try:
        cfg = yaml.load(Path(path).read_text(), Loader=UniqueKeyLoader)
    except DuplicateQueryError as e:
        raise DuplicateQueryError(f"{path}: {e}") from None
    except yaml.YAMLError as e:
        raise ValueError(f"Could not parse query file {path}: {e}") from e

    if isinstance(cfg, list):
        return _pairs_from_yaml_queries(cfg, path), {}
    if not isinstance(cfg, dict) or "queries" not in cfg:
        raise ValueError(f"{path}: expected a 'queries' section")

    options = {k: v for k, v in cfg.items() if k != "queries"}
    return _pairs_from_yaml_queries(cfg["queries"], path), options
