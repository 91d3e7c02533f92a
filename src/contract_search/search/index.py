"""Immutable inverted index snapshots.

An ``InvertedIndex`` is built in one pass from a record snapshot and never
modified afterwards. Refreshing data means building a new index and swapping
the reference held by the engine, so a query can never observe a half-built
index.

Two views are kept:

- whole-document postings: term -> ordinals of records whose concatenated
  searchable text contains the term
- per-field postings: (field, term) -> ordinals, used to tell which fields
  a term actually occurs in
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import hashlib
import logging
from types import MappingProxyType

import orjson

from contract_search.domain.model import SEARCHABLE_FIELDS, Contract
from contract_search.search.analyzers import StandardAnalyzer


logger = logging.getLogger(__name__)

_EMPTY: frozenset[int] = frozenset()


@dataclass(frozen=True)
class InvertedIndex:
    """Read-only term -> record-ordinal mapping over active records."""

    records: tuple[Contract, ...] = ()
    postings: Mapping[str, frozenset[int]] = field(default_factory=lambda: MappingProxyType({}))
    field_postings: Mapping[tuple[str, str], frozenset[int]] = field(default_factory=lambda: MappingProxyType({}))
    vocabulary: tuple[str, ...] = ()
    fingerprint: str = ""

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, term: object) -> bool:
        return term in self.postings

    @property
    def is_empty(self) -> bool:
        return not self.records

    def lookup(self, term: str) -> frozenset[int]:
        return self.postings.get(term, _EMPTY)

    def field_lookup(self, field_name: str, term: str) -> frozenset[int]:
        return self.field_postings.get((field_name, term), _EMPTY)

    def fields_containing(self, ordinal: int, terms: Iterable[str]) -> tuple[str, ...]:
        """Return the searchable fields of record ``ordinal`` that hold any of ``terms``."""
        wanted = list(terms)
        return tuple(
            name for name in SEARCHABLE_FIELDS if any(ordinal in self.field_lookup(name, term) for term in wanted)
        )

    def category_counts(self) -> list[tuple[str, int]]:
        """Return (category, record count) pairs, most common first."""
        counts = Counter(record.category for record in self.records if record.category)
        return counts.most_common()


def snapshot_fingerprint(records: Sequence[Contract]) -> str:
    """Return a stable identity for a record snapshot."""
    payload = orjson.dumps(
        [record.model_dump(mode="json") for record in records],
        option=orjson.OPT_SORT_KEYS,
    )
    return hashlib.sha256(payload).hexdigest()


def build_index(
    records: Iterable[Contract],
    analyzer: StandardAnalyzer | None = None,
    *,
    fingerprint: str = "",
) -> InvertedIndex:
    """Build a fresh index from ``records``.

    Inactive records are dropped before indexing, so their ordinals never
    appear in any posting list.
    """
    analyzer = analyzer or StandardAnalyzer()
    active = tuple(record for record in records if record.is_active)

    postings: dict[str, set[int]] = defaultdict(set)
    field_postings: dict[tuple[str, str], set[int]] = defaultdict(set)

    for ordinal, record in enumerate(active):
        fields = record.searchable_fields()
        for term in analyzer.terms(" ".join(fields.values())):
            postings[term].add(ordinal)
        for field_name, text in fields.items():
            for term in analyzer.terms(text):
                field_postings[(field_name, term)].add(ordinal)

    index = InvertedIndex(
        records=active,
        postings=MappingProxyType({term: frozenset(ordinals) for term, ordinals in postings.items()}),
        field_postings=MappingProxyType({key: frozenset(ordinals) for key, ordinals in field_postings.items()}),
        vocabulary=tuple(sorted(postings)),
        fingerprint=fingerprint,
    )
    logger.debug(
        "Built inverted index",
        extra={
            "records": len(active),
            "terms": len(index.postings),
            "field_terms": len(index.field_postings),
        },
    )
    return index
