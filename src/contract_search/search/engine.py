"""Tiered query engine over an immutable inverted index.

Each query term is matched against the index in three tiers: exact (term is
indexed), partial (containment either way) and fuzzy (containment of the
query or edit-distance similarity). Every hit adds the tier's weight to the
record's running score, so an exact term also collects the fuzzy weight; the
record's match type is the best tier it reached.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
import logging
import time

from contract_search.config import Settings
from contract_search.domain.model import Contract
from contract_search.domain.search import (
    MatchType,
    SearchFilters,
    SearchOptions,
    SearchResponse,
    SearchResult,
)
from contract_search.observability.metrics import INDEX_SIZE, SEARCH_COUNT, SEARCH_LATENCY
from contract_search.search.analytics import AnalyticsCollector
from contract_search.search.analyzers import StandardAnalyzer
from contract_search.search.fuzzy import find_fuzzy_matches
from contract_search.search.index import InvertedIndex, build_index
from contract_search.search.ranking import filter_and_sort
from contract_search.search.snippet import build_snippet, date_score, highlight_fields, value_score


logger = logging.getLogger(__name__)

# Long-text fields scanned for a snippet, in priority order
SNIPPET_FIELDS: tuple[str, ...] = ("description", "notes")


@dataclass
class _Candidate:
    """Score accumulator for one record while a query is assembled."""

    score: float = 0.0
    match_type: MatchType = MatchType.FUZZY
    query_terms: dict[str, None] = field(default_factory=dict)
    index_terms: set[str] = field(default_factory=set)

    def add(self, match_type: MatchType, weight: float, query_term: str, index_term: str) -> None:
        if not self.query_terms:
            self.match_type = match_type
        else:
            self.match_type = self.match_type.best(match_type)
        self.score += weight
        self.query_terms.setdefault(query_term, None)
        self.index_terms.add(index_term)


class SearchEngine:
    """In-memory contract search engine.

    The engine owns one ``InvertedIndex`` reference. ``rebuild`` constructs a
    complete replacement and swaps it in; a search captures the reference
    once, so it always runs against a single consistent snapshot.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        analyzer: StandardAnalyzer | None = None,
        analytics: AnalyticsCollector | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.settings = settings or Settings()
        self.analyzer = analyzer or StandardAnalyzer(max_tokens=self.settings.max_query_tokens)
        self.analytics = analytics or AnalyticsCollector(
            window_size=self.settings.analytics_window,
            popular_limit=self.settings.popular_queries_limit,
        )
        self._today = today
        self._index = InvertedIndex()

    @property
    def index(self) -> InvertedIndex:
        return self._index

    def rebuild(self, records: Iterable[Contract], *, fingerprint: str = "") -> InvertedIndex:
        """Build a new index from ``records`` and swap it in."""
        index = build_index(records, self.analyzer, fingerprint=fingerprint)
        self.swap(index)
        return index

    def swap(self, index: InvertedIndex) -> None:
        """Replace the current index reference."""
        self._index = index
        INDEX_SIZE.labels(view="records").set(len(index))
        INDEX_SIZE.labels(view="terms").set(len(index.postings))
        INDEX_SIZE.labels(view="field_terms").set(len(index.field_postings))
        logger.info("Search index swapped", extra={"records": len(index), "fingerprint": index.fingerprint[:12]})

    def search(
        self,
        query: str,
        filters: SearchFilters | None = None,
        options: SearchOptions | None = None,
    ) -> SearchResponse:
        """Run ``query`` and return ranked, filtered, truncated results.

        Args:
            query: Free text typed by the user.
            filters: Facets and ordering; defaults to no facets, relevance desc.
            options: Per-call overrides for ``max_results`` and ``fuzzy_threshold``.

        Returns:
            SearchResponse with the top results and the pre-truncation total.
        """
        if not query or not query.strip():
            return SearchResponse(query=query or "")

        started = time.perf_counter()
        index = self._index
        filters = filters or SearchFilters()
        options = options or SearchOptions()
        max_results = options.max_results or self.settings.max_results
        threshold = (
            options.fuzzy_threshold if options.fuzzy_threshold is not None else self.settings.fuzzy_threshold
        )

        # Repeated query terms would only inflate scores uniformly
        terms = list(dict.fromkeys(self.analyzer.terms(query)))
        candidates = self._collect(index, terms, threshold)

        value_field = self.settings.value_field
        scored = [self._to_result(index, ordinal, candidate) for ordinal, candidate in candidates.items()]
        ranked = filter_and_sort(scored, filters, value_field)
        total = len(ranked)

        results = [self._enrich(result, terms) for result in ranked[:max_results]]

        elapsed = time.perf_counter() - started
        elapsed_ms = elapsed * 1000
        outcome = "hit" if total else "miss"
        SEARCH_LATENCY.labels(outcome=outcome).observe(elapsed)
        SEARCH_COUNT.labels(outcome=outcome).inc()
        self.analytics.record_search(query, elapsed_ms, success=total > 0)

        logger.debug(
            "Search completed",
            extra={"terms": len(terms), "candidates": len(candidates), "total_results": total},
        )
        return SearchResponse(query=query, results=results, search_time_ms=elapsed_ms, total_results=total)

    def _collect(self, index: InvertedIndex, terms: list[str], threshold: float) -> dict[int, _Candidate]:
        settings = self.settings
        candidates: dict[int, _Candidate] = {}

        def credit(postings: Iterable[int], match_type: MatchType, weight: float, term: str, indexed: str) -> None:
            for ordinal in postings:
                candidates.setdefault(ordinal, _Candidate()).add(match_type, weight, term, indexed)

        for term in terms:
            credit(index.lookup(term), MatchType.EXACT, settings.exact_match_weight, term, term)

            for indexed in index.vocabulary:
                if indexed != term and (term in indexed or indexed in term):
                    credit(index.lookup(indexed), MatchType.PARTIAL, settings.partial_match_weight, term, indexed)

            # Equal and containing terms also pass the fuzzy rule and earn its weight on top
            fuzzy = find_fuzzy_matches(term, index.vocabulary, threshold, limit=settings.max_fuzzy_expansions)
            for indexed, _distance in fuzzy:
                credit(index.lookup(indexed), MatchType.FUZZY, settings.fuzzy_match_weight, term, indexed)

        return candidates

    def _to_result(self, index: InvertedIndex, ordinal: int, candidate: _Candidate) -> SearchResult:
        record = index.records[ordinal]
        return SearchResult(
            record=record,
            relevance_score=candidate.score,
            match_type=candidate.match_type,
            matched_tokens=tuple(candidate.query_terms),
            matched_fields=index.fields_containing(ordinal, candidate.index_terms),
            date_score=date_score(record.contract_date, self._today()),
            value_score=value_score(record.monetary_value(self.settings.value_field)),
        )

    def _enrich(self, result: SearchResult, terms: list[str]) -> SearchResult:
        settings = self.settings
        record = result.record
        fields = record.searchable_fields()
        return result.model_copy(
            update={
                "highlights": highlight_fields(fields, terms, settings.highlight_open_tag, settings.highlight_close_tag),
                "snippet": build_snippet(
                    [fields[name] for name in SNIPPET_FIELDS],
                    terms,
                    fallback=record.description,
                    context_chars=settings.snippet_context_chars,
                    fallback_chars=settings.snippet_fallback_chars,
                ),
            }
        )
