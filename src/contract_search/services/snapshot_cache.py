"""Record snapshot cache with a staleness window.

The snapshot is fetched at most once per ``snapshot_ttl_seconds`` regardless
of how often users type, and the index is rebuilt only when the fetched
records actually differ from the ones currently indexed.
"""

import asyncio
from collections.abc import Callable
import logging
import time

from contract_search.adapters.record_source import RecordSource
from contract_search.config import Settings
from contract_search.errors import RecordSourceError
from contract_search.observability.metrics import SNAPSHOT_FETCHES
from contract_search.search.engine import SearchEngine
from contract_search.search.index import InvertedIndex, snapshot_fingerprint


logger = logging.getLogger(__name__)


class SnapshotCache:
    """Keeps the engine's index in step with the record source.

    This class provides a testable, injectable service: the record source,
    the engine and the clock are all passed in.
    """

    def __init__(
        self,
        settings: Settings,
        source: RecordSource,
        engine: SearchEngine,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize snapshot cache.

        Args:
            settings: Settings instance with page size and TTL
            source: Record source to fetch snapshots from
            engine: Engine whose index is rebuilt on new snapshots
            clock: Monotonic clock in seconds
        """
        self.settings = settings
        self.source = source
        self.engine = engine
        self._clock = clock
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()
        self._loading = False
        self.fetch_count = 0
        self.rebuild_count = 0

    @property
    def is_loading(self) -> bool:
        """True while a snapshot fetch is in flight."""
        return self._loading

    @property
    def has_snapshot(self) -> bool:
        return self._fetched_at is not None

    @property
    def is_fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.settings.snapshot_ttl_seconds

    def invalidate(self) -> None:
        """Mark the snapshot stale so the next access refetches it."""
        self._fetched_at = None

    async def ensure_fresh(self) -> InvertedIndex:
        """Return the current index, refreshing the snapshot first when stale.

        Raises:
            RecordSourceError: The snapshot could not be fetched. The index
                in place before the call is left untouched.
        """
        if self.is_fresh:
            return self.engine.index

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.is_fresh:
                return self.engine.index

            self._loading = True
            try:
                page = await self.source.fetch_all(self.settings.fetch_page_size)
            except RecordSourceError as exc:
                SNAPSHOT_FETCHES.labels(status="error").inc()
                logger.warning("Record snapshot fetch failed: %s", exc)
                raise
            except Exception as exc:
                SNAPSHOT_FETCHES.labels(status="error").inc()
                logger.error(f"Unexpected error fetching record snapshot: {exc}", exc_info=True)
                raise RecordSourceError(f"unexpected_error:{exc.__class__.__name__}") from exc
            finally:
                self._loading = False

            SNAPSHOT_FETCHES.labels(status="ok").inc()
            self.fetch_count += 1
            self._fetched_at = self._clock()

            fingerprint = snapshot_fingerprint(page.data)
            if fingerprint != self.engine.index.fingerprint:
                self.engine.rebuild(page.data, fingerprint=fingerprint)
                self.rebuild_count += 1
            else:
                logger.debug("Record snapshot unchanged; keeping current index")
            return self.engine.index
