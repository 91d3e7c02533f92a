"""Live query controller - debounced search-as-you-type.

Orchestrates the snapshot cache, the query engine and search history for one
search box. Runs on the asyncio event loop; all methods must be called from
within it. Every keystroke bumps a generation counter. A query whose
generation is no longer current when it finishes is discarded, so a slow
response never overwrites a newer one.

State machine::

    IDLE -> DEBOUNCING -> QUERYING -> DISPLAYING | EMPTY | ERROR
      ^______________________________________________|  (clear / cancel)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import logging
from typing import Any

from contract_search.adapters.history_store import HistoryStore, JsonFileHistoryStore
from contract_search.adapters.record_source import HttpRecordSource, RecordSource
from contract_search.config import Settings, get_settings
from contract_search.domain.search import (
    SearchAnalytics,
    SearchFilters,
    SearchOptions,
    SearchResponse,
    SearchResult,
    SearchSuggestion,
    SessionState,
    SuggestionType,
)
from contract_search.errors import RecordSourceError
from contract_search.observability.context import bound_search_context, generate_session_id
from contract_search.observability.logging import configure_logging
from contract_search.search.engine import SearchEngine
from contract_search.services.exporters import ExporterRegistry, ResultExporter
from contract_search.services.history_service import SearchHistoryService
from contract_search.services.snapshot_cache import SnapshotCache


logger = logging.getLogger(__name__)


class LiveSearchController:
    """Consumer-facing search API for one search session.

    Write side: ``set_query``, ``set_filters``, ``reset_filters``, ``clear``,
    ``cancel``, ``save_search``, ``export_results``. Read side: ``results``,
    ``suggestions``, ``total_results``, ``search_time_ms``, ``is_loading``,
    ``state``. None of these raise for data-source or persistence failures.
    """

    def __init__(
        self,
        settings: Settings,
        engine: SearchEngine,
        snapshots: SnapshotCache,
        history: SearchHistoryService | None = None,
        exporters: ExporterRegistry | None = None,
        *,
        options: SearchOptions | None = None,
        session_id: str | None = None,
    ):
        self.settings = settings
        self.engine = engine
        self.snapshots = snapshots
        self.history = history
        self.exporters = exporters or ExporterRegistry(settings.value_field)
        self.options = options or SearchOptions()
        self.session_id = session_id or generate_session_id()

        self._query = ""
        self._filters = SearchFilters()
        self._response = SearchResponse()
        self._state = SessionState.IDLE
        self._error: Exception | None = None
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def filters(self) -> SearchFilters:
        return self._filters

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def response(self) -> SearchResponse:
        return self._response

    @property
    def results(self) -> list[SearchResult]:
        return self._response.results

    @property
    def total_results(self) -> int:
        return self._response.total_results

    @property
    def search_time_ms(self) -> float:
        return self._response.search_time_ms

    @property
    def has_results(self) -> bool:
        return self._response.has_results

    @property
    def is_loading(self) -> bool:
        """True while the record snapshot is being fetched."""
        return self.snapshots.is_loading

    @property
    def suggestions(self) -> list[SearchSuggestion]:
        """Suggestions offered while the input is empty.

        Recent history comes first, then the largest categories with live
        counts from the current index, then popular queries.
        """
        settings = self.settings
        if not settings.enable_suggestions or self._query.strip():
            return []

        suggestions: list[SearchSuggestion] = []
        if settings.enable_history and self.history is not None:
            recent = self.history.get_history()[: settings.suggestion_history_limit]
            suggestions.extend(
                SearchSuggestion(id=f"history-{idx}", text=item, type=SuggestionType.RECENT)
                for idx, item in enumerate(recent)
            )

        categories = self.engine.index.category_counts()[: settings.suggestion_category_limit]
        suggestions.extend(
            SearchSuggestion(id=f"category-{idx}", text=category, type=SuggestionType.CATEGORY, count=count)
            for idx, (category, count) in enumerate(categories)
        )

        if settings.enable_analytics:
            popular = self.engine.analytics.snapshot().popular_queries[: settings.suggestion_popular_limit]
            suggestions.extend(
                SearchSuggestion(id=f"popular-{idx}", text=item, type=SuggestionType.POPULAR)
                for idx, item in enumerate(popular)
            )

        return suggestions[: settings.max_suggestions]

    def get_analytics(self) -> SearchAnalytics:
        return self.engine.analytics.snapshot()

    def saved_searches(self) -> dict[str, str]:
        if self.history is None:
            return {}
        return self.history.saved_searches()

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        """Record a keystroke; the search runs once typing pauses."""
        self._query = text
        self._invalidate()

        if not text.strip() or len(text.strip()) < self.settings.min_query_length:
            self._enter_idle()
            return

        self._state = SessionState.DEBOUNCING
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.settings.debounce_seconds, self._fire, self._generation)

    def set_filters(self, partial: Mapping[str, Any]) -> None:
        """Replace the given facets and re-run the current query right away."""
        self._filters = self._filters.with_updates(partial)
        self._rerun()

    def reset_filters(self) -> None:
        self._filters = SearchFilters()
        self._rerun()

    def clear(self) -> None:
        """Empty the input and return to idle."""
        self.set_query("")

    def cancel(self) -> None:
        """Abandon the pending or running query and return to idle."""
        self._invalidate()
        self._enter_idle()

    async def refresh(self) -> None:
        """Force a snapshot refetch and re-run the current query."""
        self.snapshots.invalidate()
        if self._query.strip():
            self._rerun()
            await self.settle()
        else:
            await self.preload()

    async def preload(self) -> bool:
        """Warm the snapshot and index before the first keystroke."""
        try:
            await self.snapshots.ensure_fresh()
        except RecordSourceError:
            return False
        return True

    async def settle(self) -> None:
        """Wait until no debounce timer is pending and no query is running."""
        while self._timer is not None or self._inflight:
            if self._inflight:
                await asyncio.gather(*list(self._inflight), return_exceptions=True)
            else:
                await asyncio.sleep(min(self.settings.debounce_seconds, 0.01))

    def save_search(self, name: str) -> bool:
        """Persist the current query under ``name``."""
        if self.history is None or not self._query.strip():
            return False
        return self.history.save(name, self._query)

    def clear_history(self) -> None:
        if self.history is not None:
            self.history.clear()

    def register_exporter(self, fmt: str, exporter: ResultExporter) -> None:
        self.exporters.register(fmt, exporter)

    def export_results(self, fmt: str) -> Any:
        """Hand the current results to the exporter registered for ``fmt``."""
        return self.exporters.export(fmt, self.results)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _invalidate(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _enter_idle(self) -> None:
        self._state = SessionState.IDLE
        self._response = SearchResponse()
        self._error = None

    def _rerun(self) -> None:
        if not self._query.strip() or len(self._query.strip()) < self.settings.min_query_length:
            return
        self._invalidate()
        self._state = SessionState.QUERYING
        self._start(self._generation)

    def _fire(self, generation: int) -> None:
        self._timer = None
        if generation != self._generation:
            return
        self._state = SessionState.QUERYING
        self._start(generation)

    def _start(self, generation: int) -> None:
        task = asyncio.get_running_loop().create_task(self._run(generation, self._query.strip()))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, generation: int, query: str) -> None:
        with bound_search_context(self.session_id, generation):
            try:
                await self.snapshots.ensure_fresh()
            except RecordSourceError as exc:
                if generation == self._generation:
                    self._fail(query, exc)
                return

            if generation != self._generation:
                logger.debug("Discarding superseded query before search")
                return

            try:
                response = self.engine.search(query, self._filters, self.options)
            except Exception as exc:
                logger.error(f"Search failed for generation {generation}: {exc}", exc_info=True)
                self._fail(query, exc)
                return

            self._response = response
            self._error = None
            self._state = SessionState.DISPLAYING if response.total_results else SessionState.EMPTY
            if self.settings.enable_history and self.history is not None:
                self.history.add(query)

    def _fail(self, query: str, exc: Exception) -> None:
        self._response = SearchResponse(query=query)
        self._error = exc
        self._state = SessionState.ERROR


def build_live_search(
    settings: Settings | None = None,
    *,
    source: RecordSource | None = None,
    store: HistoryStore | None = None,
) -> LiveSearchController:
    """Wire a controller with the default HTTP source and file-backed history.

    Also applies the logging settings, so call it once at startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)
    engine = SearchEngine(settings)
    snapshots = SnapshotCache(settings, source or HttpRecordSource(settings), engine)
    history = SearchHistoryService(
        store or JsonFileHistoryStore(settings.resolved_history_path()),
        max_items=settings.history_max_items,
    )
    return LiveSearchController(settings, engine, snapshots, history)
