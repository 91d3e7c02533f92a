"""Aggregate counters for search operations."""

from collections import deque

from contract_search.domain.search import SearchAnalytics


class AnalyticsCollector:
    """Lightweight running counters for the query engine.

    Response time is averaged over the last ``window_size`` searches; the
    success rate covers every search since the collector was created or
    reset. Popular queries are successful queries, oldest evicted first.
    """

    def __init__(self, window_size: int = 1000, popular_limit: int = 10):
        self.window_size = window_size
        self.popular_limit = popular_limit
        self._latencies: deque[float] = deque(maxlen=window_size)
        self._popular: deque[str] = deque(maxlen=popular_limit)
        self._total = 0
        self._successes = 0
        self._last_ms = 0.0

    def record_search(self, query: str, latency_ms: float, success: bool) -> None:
        """Record one completed search."""
        self._total += 1
        self._last_ms = latency_ms
        self._latencies.append(latency_ms)
        if success:
            self._successes += 1
            normalized = query.strip()
            if normalized and normalized not in self._popular:
                self._popular.append(normalized)

    def snapshot(self) -> SearchAnalytics:
        """Return the current counters as an immutable value."""
        average = sum(self._latencies) / len(self._latencies) if self._latencies else 0.0
        return SearchAnalytics(
            total_searches=self._total,
            average_response_time_ms=average,
            success_rate=self._successes / self._total if self._total else 0.0,
            popular_queries=tuple(self._popular),
            last_search_time_ms=self._last_ms,
        )

    def reset(self) -> None:
        """Reset all counters."""
        self._latencies.clear()
        self._popular.clear()
        self._total = 0
        self._successes = 0
        self._last_ms = 0.0
