"""Adapters for the collaborators outside the engine: record source and history store."""

from contract_search.adapters.history_store import HistoryStore, InMemoryHistoryStore, JsonFileHistoryStore
from contract_search.adapters.record_source import HttpRecordSource, RecordSource, StaticRecordSource


__all__ = [
    "HistoryStore",
    "HttpRecordSource",
    "InMemoryHistoryStore",
    "JsonFileHistoryStore",
    "RecordSource",
    "StaticRecordSource",
]
