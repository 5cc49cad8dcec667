# oligo_count/registry.py
"""
Registry of named query sequences and their per-file match counts.

The mapping is used for lookups and updates; the separate `order` tuple fixes
the order in which queries are reported and never changes after construction.
"""

from typing import Iterable, Iterator, List, Tuple

from oligo_count.logic import normalize_sequence


class DuplicateQueryError(ValueError):
    """Raised when two queries share a name."""


class UnknownQueryError(KeyError):
    """Raised when a count is requested for a name that was never registered."""


class QueryEntry:
    """
    One named query and its running match count for the current file.

    Attributes:
        name (str): Label chosen by the caller.
        sequence (str): Normalized query sequence.
        count (int): Number of reads in the current file that matched.
    """

    __slots__ = ("name", "sequence", "count")

    def __init__(self, name: str, sequence: str, count: int = 0) -> None:
        self.name = name
        self.sequence = normalize_sequence(sequence)
        self.count = count

    def __repr__(self) -> str:
        return f"QueryEntry({self.name!r}, {self.sequence!r}, count={self.count})"


class QueryRegistry:
    """
    Ordered collection of query entries with per-query counts.

    Built once from (name, sequence) pairs; counts are incremented while a
    file is processed and reset between files.
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]]) -> None:
        """
        Args:
            pairs: (name, sequence) tuples in report order.

        Raises:
            DuplicateQueryError: If a name appears twice.
            ValueError: If a name or sequence is empty.
        """
        self.entries = {}
        order = []
        for name, sequence in pairs:
            name = str(name).strip()
            if not name:
                raise ValueError("Query name must not be empty")
            if name in self.entries:
                raise DuplicateQueryError(f"Duplicate query name: {name!r}")
            entry = QueryEntry(name, str(sequence))
            if not entry.sequence:
                raise ValueError(f"Query {name!r} has an empty sequence")
            self.entries[name] = entry
            order.append(name)
        self.order = tuple(order)

    def increment(self, name: str) -> None:
        """Adds one to the count of `name`."""
        try:
            self.entries[name].count += 1
        except KeyError:
            raise UnknownQueryError(name) from None

    def reset_all(self) -> None:
        """Sets every count back to zero."""
        for entry in self.entries.values():
            entry.count = 0

    def snapshot_in_order(self) -> List[Tuple[str, str, int]]:
        """Returns (name, sequence, count) triples in the order the queries were supplied."""
        return [(entry.name, entry.sequence, entry.count)
                for entry in map(self.entries.__getitem__, self.order)]

    def items(self) -> Iterator[Tuple[str, QueryEntry]]:
        return ((name, self.entries[name]) for name in self.order)

    def copy(self) -> "QueryRegistry":
        """A new registry holding the same queries with zero counts."""
        return QueryRegistry((entry.name, entry.sequence) for _, entry in self.items())

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.order)

    def __len__(self) -> int:
        return len(self.order)

    def __str__(self) -> str:
        lines = ["QueryRegistry:"]
        for i, (name, sequence, count) in enumerate(self.snapshot_in_order()):
            lines.append(f"[{i:3} ]  {name}: {sequence} (count: {count})")
        return "\n".join(lines)
