"""Unit tests for Settings."""

from pathlib import Path

from pydantic import ValidationError
import pytest

from contract_search.config import Settings, get_settings


@pytest.mark.unit
def test_defaults_match_documented_values():
    settings = Settings()

    assert settings.debounce_ms == 300
    assert settings.debounce_seconds == pytest.approx(0.3)
    assert settings.snapshot_ttl_seconds == 300.0
    assert settings.fetch_page_size == 1000
    assert settings.max_results == 20
    assert settings.fuzzy_threshold == 0.7
    assert settings.max_query_tokens == 50
    assert (settings.exact_match_weight, settings.partial_match_weight, settings.fuzzy_match_weight) == (10, 6, 3)
    assert settings.value_field == "penalty"
    assert settings.history_max_items == 20


@pytest.mark.unit
def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DEBOUNCE_MS", "250")
    monkeypatch.setenv("VALUE_FIELD", "total_value")
    monkeypatch.setenv("ENABLE_ANALYTICS", "false")

    settings = Settings()

    assert settings.debounce_ms == 250
    assert settings.value_field == "total_value"
    assert settings.enable_analytics is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides",
    [
        {"fuzzy_threshold": 1.5},
        {"max_results": 0},
        {"value_field": "discount"},
        {"exact_match_weight": 2.0},
        {"fuzzy_match_weight": 8.0},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


@pytest.mark.unit
def test_history_path_expands_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    settings = Settings(history_path=Path("~/history.json"))

    assert settings.resolved_history_path() == tmp_path / "history.json"


@pytest.mark.unit
def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
