"""Unit tests for facet filters and deterministic ordering."""

from datetime import date

import pytest

from contract_search.domain.model import Branch
from contract_search.domain.search import MatchType, SearchFilters, SearchResult, SortKey, SortOrder
from contract_search.search.ranking import collation_key, filter_and_sort, matches_filters, sort_results


def _result(record, score=10.0):
    return SearchResult(record=record, relevance_score=score, match_type=MatchType.EXACT)


@pytest.mark.unit
def test_collation_ignores_accents_and_case():
    titles = ["banana", "Árvore", "abacaxi", "Ábaco"]

    assert sorted(titles, key=collation_key) == ["abacaxi", "Ábaco", "Árvore", "banana"]


@pytest.mark.unit
def test_empty_filters_pass_everything(contracts):
    filters = SearchFilters()

    assert all(matches_filters(record, filters) for record in contracts)


@pytest.mark.unit
def test_category_filter_is_case_insensitive(contracts):
    filters = SearchFilters(categories=("software", "ti"))

    assert [record.id for record in contracts if matches_filters(record, filters)] == [1, 3]


@pytest.mark.unit
def test_date_range_bounds_are_inclusive(contracts):
    filters = SearchFilters(date_range={"start": date(2024, 1, 15), "end": date(2024, 3, 10)})

    assert [record.id for record in contracts if matches_filters(record, filters)] == [1, 3]


@pytest.mark.unit
def test_value_range_reads_configured_field(contracts):
    filters = SearchFilters(value_range={"min": 100000})

    assert [record.id for record in contracts if matches_filters(record, filters, "total_value")] == [1, 2]
    assert [record.id for record in contracts if matches_filters(record, filters, "penalty")] == []


@pytest.mark.unit
def test_inverted_ranges_constrain_nothing(contracts):
    filters = SearchFilters(
        date_range={"start": date(2025, 1, 1), "end": date(2020, 1, 1)},
        value_range={"min": 5000, "max": 1000},
    )

    assert all(matches_filters(record, filters) for record in contracts)


@pytest.mark.unit
@pytest.mark.parametrize("branch", [5, "5", "são paulo", "SÃO PAULO"])
def test_branch_filter_accepts_code_or_name(contracts, branch):
    filters = SearchFilters(branches=(branch,))

    assert [record.id for record in contracts if matches_filters(record, filters)] == [1, 2]


@pytest.mark.unit
def test_branch_filter_excludes_records_without_branch(contract_factory):
    record = contract_factory(9, branch=None)

    assert not matches_filters(record, SearchFilters(branches=(Branch.SAO_PAULO.value,)))


@pytest.mark.unit
def test_counterparty_filter_matches_either_party(contracts):
    filters = SearchFilters(counterparties=("horizonte",))
    by_contracting = SearchFilters(counterparties=("ACME",))

    assert [record.id for record in contracts if matches_filters(record, filters)] == [2]
    assert [record.id for record in contracts if matches_filters(record, by_contracting)] == [1, 2, 3, 4]


@pytest.mark.unit
def test_sort_by_value_honours_direction(contracts):
    results = [_result(record) for record in contracts]

    ascending = sort_results(results, SortKey.VALUE, SortOrder.ASC)
    descending = sort_results(results, SortKey.VALUE, SortOrder.DESC)

    assert [result.id for result in ascending] == [4, 3, 2, 1]
    assert [result.id for result in descending] == [1, 2, 3, 4]


@pytest.mark.unit
def test_sort_alphabetical_uses_collation(contract_factory):
    records = [
        contract_factory(1, title="Zeladoria"),
        contract_factory(2, title="Ética e compliance"),
        contract_factory(3, title="energia elétrica"),
    ]

    ordered = sort_results([_result(record) for record in records], SortKey.ALPHABETICAL, SortOrder.ASC)

    assert [result.id for result in ordered] == [3, 2, 1]


@pytest.mark.unit
def test_relevance_ties_break_by_date_then_title_then_id(contract_factory):
    records = [
        contract_factory(4, title="Beta", contract_date=date(2024, 1, 1)),
        contract_factory(3, title="Alfa", contract_date=date(2024, 1, 1)),
        contract_factory(2, title="Alfa", contract_date=date(2024, 1, 1)),
        contract_factory(1, title="Gama", contract_date=date(2024, 5, 1)),
    ]

    ordered = sort_results([_result(record) for record in records])

    assert [result.id for result in ordered] == [1, 2, 3, 4]


@pytest.mark.unit
def test_date_sort_breaks_ties_by_relevance(contract_factory):
    same_day = date(2024, 2, 2)
    low = _result(contract_factory(1, contract_date=same_day), score=3.0)
    high = _result(contract_factory(2, contract_date=same_day), score=10.0)

    ordered = sort_results([low, high], SortKey.DATE, SortOrder.ASC)

    assert [result.id for result in ordered] == [2, 1]


@pytest.mark.unit
def test_filter_and_sort_combines_stages(contracts):
    results = [_result(record, score=float(record.id)) for record in contracts]
    filters = SearchFilters(counterparties=("acme",), value_range={"max": 5000})

    ordered = filter_and_sort(results, filters)

    assert [result.id for result in ordered] == [4, 3, 2]
