"""Observability module: structured logging, search-context correlation, and metrics."""

from contract_search.observability.context import (
    bound_search_context,
    get_search_context,
    search_context,
    set_search_context,
)
from contract_search.observability.logging import JsonFormatter, configure_logging
from contract_search.observability.metrics import (
    INDEX_SIZE,
    PERSISTENCE_ERRORS,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    SNAPSHOT_FETCHES,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
)


__all__ = [
    "INDEX_SIZE",
    "PERSISTENCE_ERRORS",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "SNAPSHOT_FETCHES",
    "JsonFormatter",
    "bound_search_context",
    "configure_logging",
    "get_metrics",
    "get_metrics_content_type",
    "get_search_context",
    "init_metrics",
    "search_context",
    "set_search_context",
]
