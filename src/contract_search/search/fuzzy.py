"""Fuzzy matching for typo-tolerant search.

This module provides edit distance calculation and similarity-based term
matching for handling typos in search queries.

Similarity is ``1 - distance / max(len(a), len(b))``. A candidate that
contains the query verbatim always matches; otherwise terms shorter than three
characters never fuzzy-match because a single edit changes most of them.
"""

from __future__ import annotations

from collections.abc import Iterable
import math


MIN_FUZZY_LENGTH = 3


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses dynamic programming for O(m*n) time complexity, with optional
    early termination when distance exceeds max_distance.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 early when
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of single-character edits (insertions,
        deletions, substitutions) needed to change s1 into s2.
        If max_distance is set and exceeded, returns max_distance+1.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("software", "softwre")
        1
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Use shorter string as columns for space efficiency
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    # Only need two rows at a time
    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = curr_row[0]
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def similarity(query: str, candidate: str) -> float:
    """Return edit-distance similarity in ``[0, 1]``; two empty strings are identical."""
    longest = max(len(query), len(candidate))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(query, candidate) / longest


def max_edits_for(query: str, candidate: str, threshold: float) -> int:
    """Largest edit distance that still reaches ``threshold`` similarity."""
    longest = max(len(query), len(candidate))
    # Small epsilon keeps e.g. 0.3 * 10 from flooring to 2
    return max(0, math.floor((1 - threshold) * longest + 1e-9))


def fuzzy_match(query: str, candidate: str, threshold: float = 0.7) -> bool:
    """Return True when ``candidate`` is close enough to ``query``.

    Args:
        query: The (possibly misspelled) query term.
        candidate: An indexed term.
        threshold: Minimum similarity required.

    Returns:
        True on a substring hit or when similarity >= threshold.
    """
    if not query or not candidate:
        return False
    if query in candidate:
        return True
    if len(query) < MIN_FUZZY_LENGTH or len(candidate) < MIN_FUZZY_LENGTH:
        return False

    allowed = max_edits_for(query, candidate, threshold)
    # Length difference is a lower bound on the distance
    if abs(len(query) - len(candidate)) > allowed:
        return False
    return levenshtein_distance(query, candidate, allowed) <= allowed


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    threshold: float = 0.7,
    limit: int | None = None,
) -> list[tuple[str, int]]:
    """Find vocabulary terms that fuzzy-match the query term.

    Uses the same rule as ``fuzzy_match``, so a term equal to or containing
    the query is reported too, at distance ``len(term) - len(query_term)``.

    Args:
        query_term: The term to match (may contain typo).
        vocabulary: Indexed terms to match against.
        threshold: Minimum similarity.
        limit: Keep at most this many matches, closest first.

    Returns:
        List of (matching_term, edit_distance) tuples, sorted by
        edit distance (closest matches first), then alphabetically.
    """
    if not query_term:
        return []

    matches: list[tuple[str, int]] = []
    for term in vocabulary:
        if query_term in term:
            matches.append((term, len(term) - len(query_term)))
            continue
        if len(query_term) < MIN_FUZZY_LENGTH or len(term) < MIN_FUZZY_LENGTH:
            continue

        allowed = max_edits_for(query_term, term, threshold)
        if abs(len(query_term) - len(term)) > allowed:
            continue

        distance = levenshtein_distance(query_term, term, allowed)
        if distance <= allowed:
            matches.append((term, distance))

    matches.sort(key=lambda x: (x[1], x[0]))
    if limit is not None:
        return matches[:limit]
    return matches
