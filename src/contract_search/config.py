"""Centralized configuration for contract-search using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every knob the search engine, the live query controller and the
    collaborators read lives here so the divergent thresholds and weights
    of individual search widgets become configuration instead of code.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Record source
    api_base_url: str = Field(default="", description="Base URL of the contracts API")
    http_timeout: int = Field(default=30, ge=1, description="HTTP request timeout in seconds")
    fetch_page_size: int = Field(default=1000, ge=1, description="Page size requested when loading the snapshot")
    snapshot_ttl_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="How long a fetched record snapshot is served before it is considered stale",
    )

    # Live typing
    debounce_ms: int = Field(default=300, ge=0, description="Quiet period after the last keystroke")
    min_query_length: int = Field(default=1, ge=1, description="Shortest trimmed query that triggers a search")

    # Query engine
    max_results: int = Field(default=20, ge=1, description="Maximum results returned per query")
    fuzzy_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Minimum edit-distance similarity for a fuzzy match",
    )
    max_query_tokens: int = Field(default=50, ge=1, description="Tokens kept per tokenized text")
    max_fuzzy_expansions: int = Field(
        default=100,
        ge=1,
        description="Maximum vocabulary terms a single query token may fuzzy-match",
    )
    exact_match_weight: float = Field(default=10.0, gt=0.0, description="Score added per exact token match")
    partial_match_weight: float = Field(default=6.0, gt=0.0, description="Score added per partial token match")
    fuzzy_match_weight: float = Field(default=3.0, gt=0.0, description="Score added per fuzzy token match")
    value_field: Literal["penalty", "total_value"] = Field(
        default="penalty",
        description="Monetary attribute used by value filters, value sort and magnitude score",
    )

    # Enrichment
    snippet_context_chars: int = Field(default=50, ge=0, description="Characters kept on each side of a hit")
    snippet_fallback_chars: int = Field(default=100, ge=1, description="Description prefix used when nothing matches")
    highlight_open_tag: str = Field(default="<mark>", description="Marker inserted before a highlighted term")
    highlight_close_tag: str = Field(default="</mark>", description="Marker inserted after a highlighted term")

    # History, suggestions, analytics
    enable_history: bool = Field(default=True, description="Record successful queries in search history")
    enable_suggestions: bool = Field(default=True, description="Offer suggestions while the input is empty")
    enable_analytics: bool = Field(default=True, description="Include popular queries in suggestions")
    history_path: Path = Field(
        default=Path("~/.contract_search/history.json"),
        description="JSON file backing the durable history store",
    )
    history_max_items: int = Field(default=20, ge=1, description="Entries kept in search history")
    suggestion_history_limit: int = Field(default=3, ge=0)
    suggestion_category_limit: int = Field(default=4, ge=0)
    suggestion_popular_limit: int = Field(default=3, ge=0)
    max_suggestions: int = Field(default=10, ge=0, description="Total suggestions offered at once")
    popular_queries_limit: int = Field(default=10, ge=1, description="Popular queries remembered by analytics")
    analytics_window: int = Field(default=1000, ge=1, description="Searches averaged for response time")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON log lines")

    @model_validator(mode="after")
    def _check_weight_order(self) -> "Settings":
        # A better tier must never be worth less than a worse one
        if not self.exact_match_weight >= self.partial_match_weight >= self.fuzzy_match_weight:
            raise ValueError(
                "Match weights must satisfy EXACT_MATCH_WEIGHT >= PARTIAL_MATCH_WEIGHT >= FUZZY_MATCH_WEIGHT "
                f"(got {self.exact_match_weight}, {self.partial_match_weight}, {self.fuzzy_match_weight})."
            )
        return self

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    def resolved_history_path(self) -> Path:
        """Return the history file path with ``~`` expanded."""
        return self.history_path.expanduser()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
