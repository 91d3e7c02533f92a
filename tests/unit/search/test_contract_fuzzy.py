"""Unit tests for edit distance and fuzzy matching."""

import pytest

from contract_search.search.fuzzy import (
    find_fuzzy_matches,
    fuzzy_match,
    levenshtein_distance,
    max_edits_for,
    similarity,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        ("kitten", "sitting", 3),
        ("software", "softwre", 1),
        ("", "abc", 3),
        ("abc", "", 3),
        ("contrato", "contrato", 0),
        ("aluguel", "aluguéis", 3),
    ],
)
def test_levenshtein_distance(left, right, expected):
    assert levenshtein_distance(left, right) == expected
    assert levenshtein_distance(right, left) == expected


@pytest.mark.unit
def test_levenshtein_stops_early_past_max_distance():
    assert levenshtein_distance("abcdef", "uvwxyz", max_distance=2) == 3
    assert levenshtein_distance("a", "abcdefgh", max_distance=3) == 4


@pytest.mark.unit
def test_similarity_bounds():
    assert similarity("", "") == 1.0
    assert similarity("abc", "abc") == 1.0
    assert similarity("abc", "xyz") == 0.0
    assert similarity("software", "softwre") == pytest.approx(7 / 8)


@pytest.mark.unit
def test_max_edits_for_is_not_thrown_off_by_float_error():
    assert max_edits_for("abcdefghij", "abcdefghij", 0.7) == 3
    assert max_edits_for("software", "softwre", 0.7) == 2


@pytest.mark.unit
def test_fuzzy_match_accepts_one_typo():
    assert fuzzy_match("softwre", "software")
    assert fuzzy_match("contarto", "contrato")


@pytest.mark.unit
def test_fuzzy_match_substring_always_matches():
    assert fuzzy_match("soft", "software")
    assert fuzzy_match("ti", "ti")


@pytest.mark.unit
def test_fuzzy_match_rejects_short_and_empty_terms():
    assert not fuzzy_match("", "software")
    assert not fuzzy_match("software", "")
    assert not fuzzy_match("ab", "ac")


@pytest.mark.unit
def test_fuzzy_match_respects_threshold():
    assert not fuzzy_match("softwre", "software", threshold=0.9)
    assert not fuzzy_match("aluguel", "software")


@pytest.mark.unit
def test_find_fuzzy_matches_sorted_by_distance_then_term():
    vocabulary = ["contrato", "contratos", "contrata", "contratante", "locação"]

    matches = find_fuzzy_matches("contrado", vocabulary)

    assert matches == [("contrato", 1), ("contrata", 2), ("contratos", 2)]


@pytest.mark.unit
def test_find_fuzzy_matches_reports_equal_and_containing_terms():
    matches = find_fuzzy_matches("software", ["software", "softwares", "soft", "softwere"])

    assert matches == [("software", 0), ("softwares", 1), ("softwere", 1)]


@pytest.mark.unit
def test_find_fuzzy_matches_limit_and_short_query():
    vocabulary = ["casa", "cama", "cana", "capa"]

    assert find_fuzzy_matches("cata", vocabulary, limit=2) == [("cama", 1), ("cana", 1)]
    # Short query terms only match by containment
    assert find_fuzzy_matches("ca", vocabulary) == [("cama", 2), ("cana", 2), ("capa", 2), ("casa", 2)]
    assert find_fuzzy_matches("cs", vocabulary) == []
