"""Exception types raised by contract-search adapters and services."""

from __future__ import annotations


class ContractSearchError(Exception):
    """Base class for every error raised inside contract_search."""


class RecordSourceError(ContractSearchError):
    """The record source could not deliver a snapshot."""

    def __init__(self, reason: str, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        message = f"{reason}: {detail}" if detail else reason
        super().__init__(message)


class HistoryStoreError(ContractSearchError):
    """Reading or writing the durable history store failed."""
