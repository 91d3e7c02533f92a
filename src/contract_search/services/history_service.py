"""Search history and saved searches on top of a durable history store.

History is a most-recent-first list of query strings, deduplicated by exact
match and capped in length. Every store failure is logged and swallowed:
history degrades to empty, search keeps working.
"""

from collections.abc import Callable
import logging
from typing import TypeVar

import orjson

from contract_search.adapters.history_store import HistoryStore
from contract_search.errors import HistoryStoreError
from contract_search.observability.metrics import PERSISTENCE_ERRORS


logger = logging.getLogger(__name__)

HISTORY_KEY = "contract_search.history"
SAVED_SEARCHES_KEY = "contract_search.saved_searches"

T = TypeVar("T")


class SearchHistoryService:
    """Service for reading and appending search history.

    Args:
        store: Key-value store the history is persisted in.
        max_items: Entries kept, newest first.
    """

    def __init__(self, store: HistoryStore, max_items: int = 20):
        self.store = store
        self.max_items = max_items

    def _guarded(self, operation: str, action: Callable[[], T], default: T) -> T:
        try:
            return action()
        except (HistoryStoreError, orjson.JSONDecodeError) as exc:
            logger.warning("History %s failed: %s", operation, exc)
        except Exception as exc:
            logger.error(f"Unexpected history {operation} failure: {exc}", exc_info=True)
        PERSISTENCE_ERRORS.labels(operation=operation).inc()
        return default

    def _read_list(self) -> list[str]:
        raw = self.store.get(HISTORY_KEY)
        if not raw:
            return []
        data = orjson.loads(raw)
        if not isinstance(data, list):
            raise HistoryStoreError("history payload is not a list")
        return [item for item in data if isinstance(item, str)]

    def get_history(self) -> list[str]:
        """Return past queries, most recent first."""
        return self._guarded("read", self._read_list, [])

    def add(self, query: str) -> None:
        """Push ``query`` to the front of the history."""
        normalized = query.strip()
        if not normalized:
            return

        def write() -> None:
            history = [item for item in self._read_list() if item != normalized]
            updated = [normalized, *history][: self.max_items]
            self.store.set(HISTORY_KEY, orjson.dumps(updated).decode("utf-8"))

        self._guarded("write", write, None)

    def clear(self) -> None:
        """Forget every recorded query."""
        self._guarded("clear", lambda: self.store.delete(HISTORY_KEY), None)

    def _read_saved(self) -> dict[str, str]:
        raw = self.store.get(SAVED_SEARCHES_KEY)
        if not raw:
            return {}
        data = orjson.loads(raw)
        if not isinstance(data, dict):
            raise HistoryStoreError("saved searches payload is not an object")
        return {str(name): value for name, value in data.items() if isinstance(value, str)}

    def saved_searches(self) -> dict[str, str]:
        """Return saved searches as ``{name: query}`` in insertion order."""
        return self._guarded("read", self._read_saved, {})

    def save(self, name: str, query: str) -> bool:
        """Persist ``query`` under ``name`` and record it in history.

        Returns:
            True when the saved search was written.
        """
        normalized = query.strip()
        label = name.strip() or normalized
        if not normalized:
            return False

        def write() -> bool:
            saved = self._read_saved()
            saved[label] = normalized
            self.store.set(SAVED_SEARCHES_KEY, orjson.dumps(saved).decode("utf-8"))
            return True

        stored = self._guarded("write", write, False)
        self.add(normalized)
        if stored:
            logger.info("Saved search %r", label)
        return stored
