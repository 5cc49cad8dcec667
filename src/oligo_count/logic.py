import math


"""
Low-level sequence logic for oligo-count.

Includes case normalization, mismatch budget calculation, an early-abandoning
hamming comparison and the first-fit approximate substring test.

These functions are stateless and pure.
"""

from typing import Union


def normalize_sequence(seq: str) -> str:
    """
    Returns the canonical form of a read or query sequence.

    Surrounding whitespace is stripped and the sequence is upper-cased.
    Queries are normalized once when the registry is built and reads once
    when they enter the aggregator; the comparison loop assumes both sides
    are already normalized.

    Args:
        seq (str): A nucleotide sequence in any case.

    Returns:
        str: The upper-cased sequence.
    """
    return seq.strip().upper()


def validate_mismatch_fraction(value: Union[str, float, int]) -> float:
    """
    Parses and checks a mismatch fraction.

    Args:
        value: A number or numeric string.

    Returns:
        float: The fraction, guaranteed to lie in [0, 1].

    Raises:
        ValueError: If the value is not a number or is outside [0, 1].
    """
    try:
        fraction = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid mismatch fraction: {value!r}")
    if math.isnan(fraction) or not 0.0 <= fraction <= 1.0:
        raise ValueError(f"Mismatch fraction must be between 0 and 1, got {value!r}")
    return fraction


def mismatch_budget(query_length: int, mismatch_fraction: float) -> int:
    """
    Number of substitutions tolerated for a query of the given length.

    Rounds half up, so a 10-base query at 0.25 allows 3 mismatches
    (Python's built-in round() would give 2).

    Args:
        query_length (int): Length of the query sequence.
        mismatch_fraction (float): Allowed fraction of mismatches in [0, 1].

    Returns:
        int: Maximum number of mismatches at a single offset.
    """
    return int(math.floor(query_length * mismatch_fraction + 0.5))


def hamming_within(query: str, read: str, start: int, budget: int) -> bool:
    """
    Tests whether `query` aligns at `read[start:]` with at most `budget` substitutions.

    Stops comparing as soon as the budget is exceeded. The caller guarantees
    that `read` holds at least `len(query)` characters from `start`.

    Args:
        query (str): Normalized query sequence.
        read (str): Normalized read sequence.
        start (int): Offset in the read where the query is aligned.
        budget (int): Maximum allowed mismatches.

    Returns:
        bool: True if the alignment is within budget.
    """
    mismatches = 0
    for offset, base in enumerate(query, start):
        if read[offset] != base:
            mismatches += 1
            if mismatches > budget:
                return False
    return True


def matches(read: str, query: str, mismatch_fraction: float) -> bool:
    """
    Decides whether `query` occurs anywhere in `read` within the mismatch budget.

    Every offset from 0 to len(read) - len(query) is tried in order and the
    first offset within budget wins; the best alignment is not searched for.
    Both sequences must already be normalized.

    Args:
        read (str): Read sequence to search within.
        query (str): Query sequence to look for.
        mismatch_fraction (float): Allowed fraction of mismatches, applied to len(query).

    Returns:
        bool: True if some offset matches, False otherwise (including when
        the query is empty or longer than the read).
    """
    query_len = len(query)
    if query_len == 0 or query_len > len(read):
        return False

    budget = mismatch_budget(query_len, mismatch_fraction)
    if budget == 0:
        return query in read

    for start in range(len(read) - query_len + 1):
        if hamming_within(query, read, start, budget):
            return True
    return False
