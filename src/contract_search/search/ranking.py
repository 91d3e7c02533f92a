"""Facet filtering and result ordering.

Filters are independent predicates combined with AND; an inactive facet
always passes. Sorting is a chain of stable sorts so ties on the requested
key are broken the same way on every run: relevance, then newest date, then
title, then record id.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import unicodedata

from contract_search.domain.model import Contract
from contract_search.domain.search import SearchFilters, SearchResult, SortKey, SortOrder


def collation_key(text: str) -> tuple[str, str, str]:
    """Accent- and case-insensitive sort key with deterministic tie-breaks."""
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(char for char in decomposed if unicodedata.category(char) != "Mn")
    return base.casefold(), text.casefold(), text


def _matches_category(record: Contract, filters: SearchFilters) -> bool:
    if not filters.categories:
        return True
    wanted = {category.casefold() for category in filters.categories}
    return record.category.casefold() in wanted


def _matches_branch(record: Contract, filters: SearchFilters) -> bool:
    if not filters.branches:
        return True
    if record.branch is None:
        return False
    for branch in filters.branches:
        if isinstance(branch, int) or branch.strip().isdigit():
            if int(branch) == int(record.branch):
                return True
        elif branch.strip().casefold() == record.branch_name.casefold():
            return True
    return False


def _matches_counterparty(record: Contract, filters: SearchFilters) -> bool:
    needles = [needle.casefold() for needle in filters.counterparties if needle.strip()]
    if not needles:
        return True
    parties = (record.contracting_party.casefold(), record.contracted_party.casefold())
    return any(needle in party for needle in needles for party in parties)


def matches_filters(record: Contract, filters: SearchFilters, value_field: str = "penalty") -> bool:
    """Return True when ``record`` satisfies every active facet."""
    return (
        _matches_category(record, filters)
        and filters.date_range.contains(record.contract_date)
        and filters.value_range.contains(record.monetary_value(value_field))
        and _matches_branch(record, filters)
        and _matches_counterparty(record, filters)
    )


def _primary_key(sort_by: SortKey, value_field: str) -> Callable[[SearchResult], object]:
    if sort_by == SortKey.DATE:
        return lambda result: result.record.contract_date
    if sort_by == SortKey.VALUE:
        return lambda result: result.record.monetary_value(value_field)
    if sort_by == SortKey.ALPHABETICAL:
        return lambda result: collation_key(result.record.title)
    return lambda result: result.relevance_score


def sort_results(
    results: Iterable[SearchResult],
    sort_by: SortKey = SortKey.RELEVANCE,
    sort_order: SortOrder = SortOrder.DESC,
    value_field: str = "penalty",
) -> list[SearchResult]:
    """Order results by ``sort_by`` in ``sort_order``, breaking ties deterministically."""
    ordered = sorted(results, key=lambda result: result.record.id)
    ordered.sort(key=lambda result: collation_key(result.record.title))
    ordered.sort(key=lambda result: result.record.contract_date, reverse=True)
    ordered.sort(key=lambda result: result.relevance_score, reverse=True)
    ordered.sort(key=_primary_key(sort_by, value_field), reverse=sort_order == SortOrder.DESC)
    return ordered


def filter_and_sort(
    results: Iterable[SearchResult],
    filters: SearchFilters,
    value_field: str = "penalty",
) -> list[SearchResult]:
    """Drop results failing any facet, then order the survivors."""
    kept = [result for result in results if matches_filters(result.record, filters, value_field)]
    return sort_results(kept, filters.sort_by, filters.sort_order, value_field)
