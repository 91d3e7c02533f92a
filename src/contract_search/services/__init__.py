"""Injectable services around the engine: snapshot caching, history and export."""

from .exporters import ExporterRegistry
from .history_service import SearchHistoryService
from .snapshot_cache import SnapshotCache


__all__ = [
    "ExporterRegistry",
    "SearchHistoryService",
    "SnapshotCache",
]
