"""Durable key-value stores backing search history and saved searches.

Values are opaque strings, the way browser local storage holds them. The
file store keeps every key in one JSON object on disk and replaces the file
atomically on each write.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile
from typing import Protocol

import orjson

from contract_search.errors import HistoryStoreError


logger = logging.getLogger(__name__)


class HistoryStore(Protocol):
    """String key-value persistence."""

    def get(self, key: str) -> str | None:  # pragma: no cover - interface definition
        ...

    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface definition
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface definition
        ...


class JsonFileHistoryStore:
    """History store persisted as a single JSON object file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise HistoryStoreError(f"Cannot read {self.path}: {exc}") from exc

        try:
            data = orjson.loads(raw) if raw.strip() else {}
        except orjson.JSONDecodeError as exc:
            raise HistoryStoreError(f"Corrupt history file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise HistoryStoreError(f"Unexpected history file layout in {self.path}")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _dump(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(orjson.dumps(data, option=orjson.OPT_SORT_KEYS))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise HistoryStoreError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


class InMemoryHistoryStore:
    """Process-local history store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
