"""Domain layer - contract records and search value objects.

No infrastructure dependencies live here: no HTTP clients, no persistence.
"""

from contract_search.domain.model import Branch, Contract, ContractStatus, RecordPage
from contract_search.domain.search import (
    DateRange,
    MatchType,
    SearchAnalytics,
    SearchFilters,
    SearchOptions,
    SearchResponse,
    SearchResult,
    SearchSuggestion,
    SessionState,
    SortKey,
    SortOrder,
    SuggestionType,
    ValueRange,
)


__all__ = [
    "Branch",
    "Contract",
    "ContractStatus",
    "DateRange",
    "MatchType",
    "RecordPage",
    "SearchAnalytics",
    "SearchFilters",
    "SearchOptions",
    "SearchResponse",
    "SearchResult",
    "SearchSuggestion",
    "SessionState",
    "SortKey",
    "SortOrder",
    "SuggestionType",
    "ValueRange",
]
