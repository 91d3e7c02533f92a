"""Domain models for search functionality.

Value objects are immutable (frozen=True). A query runs against one
``SearchFilters`` instance; changing a facet produces a new instance through
``with_updates`` instead of mutating the old one.
"""

from collections.abc import Mapping
from datetime import date
from enum import StrEnum
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contract_search.domain.model import Contract


logger = logging.getLogger(__name__)


class MatchType(StrEnum):
    """Tier at which a query token matched an indexed term."""

    EXACT = "exact"
    PARTIAL = "partial"
    FUZZY = "fuzzy"

    @property
    def rank(self) -> int:
        return _MATCH_RANK[self]

    def best(self, other: "MatchType") -> "MatchType":
        return self if self.rank >= other.rank else other


_MATCH_RANK = {MatchType.EXACT: 3, MatchType.PARTIAL: 2, MatchType.FUZZY: 1}


class SortKey(StrEnum):
    RELEVANCE = "relevance"
    DATE = "date"
    VALUE = "value"
    ALPHABETICAL = "alphabetical"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class DateRange(BaseModel):
    """Inclusive date bounds; either side may be open."""

    model_config = ConfigDict(frozen=True)

    start: date | None = None
    end: date | None = None

    @property
    def is_active(self) -> bool:
        if self.start is None and self.end is None:
            return False
        # An inverted range constrains nothing
        return not (self.start is not None and self.end is not None and self.start > self.end)

    def contains(self, value: date) -> bool:
        if not self.is_active:
            return True
        if self.start is not None and value < self.start:
            return False
        return not (self.end is not None and value > self.end)


class ValueRange(BaseModel):
    """Inclusive monetary bounds; either side may be open."""

    model_config = ConfigDict(frozen=True)

    min: float | None = Field(default=None, ge=0)
    max: float | None = Field(default=None, ge=0)

    @property
    def is_active(self) -> bool:
        if self.min is None and self.max is None:
            return False
        return not (self.min is not None and self.max is not None and self.min > self.max)

    def contains(self, value: float) -> bool:
        if not self.is_active:
            return True
        if self.min is not None and value < self.min:
            return False
        return not (self.max is not None and value > self.max)


class SearchFilters(BaseModel):
    """User-selected facets plus the requested ordering."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    categories: tuple[str, ...] = ()
    date_range: DateRange = Field(default_factory=DateRange, alias="dateRange")
    value_range: ValueRange = Field(default_factory=ValueRange, alias="valueRange")
    branches: tuple[str | int, ...] = ()
    counterparties: tuple[str, ...] = Field(default=(), alias="contractors")
    sort_by: SortKey = Field(default=SortKey.RELEVANCE, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")

    def with_updates(self, partial: Mapping[str, Any]) -> "SearchFilters":
        """Return a copy with the given fields replaced.

        Each field is validated on its own. Unknown fields are dropped with a
        warning; a malformed value resets its field to the default, so it
        constrains nothing and one bad facet never discards the others.
        """
        fields = type(self).model_fields
        aliases = {info.alias: name for name, info in fields.items() if info.alias}
        data = self.model_dump()
        for key, value in partial.items():
            name = aliases.get(key, key)
            if name not in fields:
                logger.warning("Ignoring unknown filter %r", key)
                continue
            candidate = {**data, name: value}
            try:
                type(self).model_validate(candidate)
            except ValidationError as exc:
                logger.warning("Resetting malformed filter %r: %s", key, exc.errors()[0].get("msg", "invalid"))
                data.pop(name, None)
                continue
            data = candidate
        return type(self).model_validate(data)

    def describe(self) -> list[str]:
        """Render the active facets as short human-readable labels."""
        labels: list[str] = []
        if self.categories:
            labels.append(f"Categories: {', '.join(self.categories)}")
        if self.date_range.is_active:
            start = self.date_range.start.strftime("%d/%m/%Y") if self.date_range.start else "..."
            end = self.date_range.end.strftime("%d/%m/%Y") if self.date_range.end else "..."
            labels.append(f"Period: {start} - {end}")
        if self.value_range.is_active:
            low = f"R$ {self.value_range.min:,.2f}" if self.value_range.min is not None else "0"
            high = f"R$ {self.value_range.max:,.2f}" if self.value_range.max is not None else "∞"
            labels.append(f"Value: {low} - {high}")
        if self.branches:
            labels.append(f"Branches: {', '.join(str(branch) for branch in self.branches)}")
        if self.counterparties:
            labels.append(f"Companies: {', '.join(self.counterparties)}")
        return labels


class SearchOptions(BaseModel):
    """Per-call overrides for the engine defaults."""

    model_config = ConfigDict(frozen=True)

    max_results: int | None = Field(default=None, ge=1)
    fuzzy_threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class SearchResult(BaseModel):
    """Value object for a single, enriched search result."""

    model_config = ConfigDict(frozen=True)

    record: Contract
    relevance_score: float
    match_type: MatchType
    matched_tokens: tuple[str, ...] = ()
    matched_fields: tuple[str, ...] = ()
    highlights: dict[str, str] = Field(default_factory=dict)
    snippet: str = ""
    date_score: float = 0.0
    value_score: float = 0.0

    @property
    def id(self) -> int:
        return self.record.id


class SearchResponse(BaseModel):
    """Ranked results of one query plus timing metadata."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    results: list[SearchResult] = Field(default_factory=list)
    search_time_ms: float = 0.0
    total_results: int = 0

    @property
    def has_results(self) -> bool:
        return bool(self.results)


class SuggestionType(StrEnum):
    RECENT = "recent"
    CATEGORY = "category"
    POPULAR = "popular"


class SearchSuggestion(BaseModel):
    """Entry offered to the user while the search box is empty."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    type: SuggestionType
    count: int | None = None


class SearchAnalytics(BaseModel):
    """Snapshot of the aggregate search counters."""

    model_config = ConfigDict(frozen=True)

    total_searches: int = 0
    average_response_time_ms: float = 0.0
    success_rate: float = 0.0
    popular_queries: tuple[str, ...] = ()
    last_search_time_ms: float = 0.0


class SessionState(StrEnum):
    """States of a live query session."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    QUERYING = "querying"
    DISPLAYING = "displaying"
    EMPTY = "empty"
    ERROR = "error"
