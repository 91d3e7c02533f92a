"""Result enrichment: highlighting, snippets and advisory scores.

Highlighting wraps every case-insensitive occurrence of every query term in
a marker pair. Overlapping hits are resolved before any marker is inserted,
so stripping the markers again always yields the original text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
import math
import re


ELLIPSIS = "..."
DEFAULT_OPEN_TAG = "<mark>"
DEFAULT_CLOSE_TAG = "</mark>"


def _find_term_spans(text: str, terms: Sequence[str]) -> list[tuple[int, int]]:
    """Return non-overlapping (start, end) spans of term hits, in text order."""
    spans: list[tuple[int, int]] = []
    for term in terms:
        if not term:
            continue
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        spans.extend((match.start(), match.end()) for match in pattern.finditer(text))

    # Sort by start position, then by length (longer matches first to prefer them)
    spans.sort(key=lambda span: (span[0], -(span[1] - span[0])))

    selected: list[tuple[int, int]] = []
    for start, end in spans:
        if selected and start < selected[-1][1]:
            continue
        selected.append((start, end))
    return selected


def highlight_terms(
    text: str,
    terms: Sequence[str],
    open_tag: str = DEFAULT_OPEN_TAG,
    close_tag: str = DEFAULT_CLOSE_TAG,
) -> str:
    """Wrap every occurrence of ``terms`` in ``text`` with the given markers.

    Args:
        text: Field text to highlight.
        terms: Query terms; matching ignores case.
        open_tag: Marker inserted before each hit.
        close_tag: Marker inserted after each hit.

    Returns:
        The highlighted text, or ``text`` unchanged when nothing matches.
    """
    if not text or not terms:
        return text

    spans = _find_term_spans(text, terms)
    if not spans:
        return text

    parts: list[str] = []
    cursor = 0
    for start, end in spans:
        parts.append(text[cursor:start])
        parts.append(f"{open_tag}{text[start:end]}{close_tag}")
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def highlight_fields(
    fields: Mapping[str, str],
    terms: Sequence[str],
    open_tag: str = DEFAULT_OPEN_TAG,
    close_tag: str = DEFAULT_CLOSE_TAG,
) -> dict[str, str]:
    """Highlight each field independently; unmatched fields pass through."""
    return {name: highlight_terms(text, terms, open_tag, close_tag) for name, text in fields.items()}


def strip_highlights(text: str, open_tag: str = DEFAULT_OPEN_TAG, close_tag: str = DEFAULT_CLOSE_TAG) -> str:
    return text.replace(open_tag, "").replace(close_tag, "")


def build_snippet(
    candidates: Sequence[str],
    terms: Sequence[str],
    *,
    fallback: str = "",
    context_chars: int = 50,
    fallback_chars: int = 100,
) -> str:
    """Build a short preview around the first literal term hit.

    Fields in ``candidates`` are scanned in priority order. In the first one
    holding a term, a window of ``context_chars`` on each side of the earliest
    hit is returned, with an ellipsis on any side cut short. When no field
    holds a literal hit (only fuzzy matches fired), a prefix of ``fallback``
    is returned instead.
    """
    for text in candidates:
        if not text:
            continue
        spans = _find_term_spans(text, terms)
        if not spans:
            continue

        hit_start, hit_end = spans[0]
        start = max(0, hit_start - context_chars)
        end = min(len(text), hit_end + context_chars)
        prefix = ELLIPSIS if start > 0 else ""
        suffix = ELLIPSIS if end < len(text) else ""
        return f"{prefix}{text[start:end]}{suffix}"

    if len(fallback) > fallback_chars:
        return fallback[:fallback_chars] + ELLIPSIS
    return fallback


def date_score(value: date, today: date | None = None) -> float:
    """Recency signal: 100 for today, decaying linearly to 0 over a year."""
    today = today or date.today()
    days = abs((today - value).days)
    return max(0.0, 100.0 - (days / 365) * 100.0)


def value_score(value: float) -> float:
    """Magnitude signal: ``20 * log10(value + 1)`` clamped to ``[0, 100]``."""
    return min(100.0, math.log10(max(value, 0.0) + 1) * 20)
