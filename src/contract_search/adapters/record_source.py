"""Record source adapters - where contract snapshots come from.

The engine asks for one large page and treats it as the authoritative
snapshot. Adapters translate transport and payload failures into
``RecordSourceError`` so callers handle a single error type.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from contract_search.config import Settings
from contract_search.domain.model import Contract, RecordPage
from contract_search.errors import RecordSourceError


logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Paginated read access to contract records."""

    async def fetch_all(self, page_size: int) -> RecordPage:  # pragma: no cover - interface definition
        ...


class HttpRecordSource:
    """Fetch contracts from the backend ``/contracts`` endpoint."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HttpRecordSource:
        self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_base_url,
                timeout=httpx.Timeout(float(self.settings.http_timeout)),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_all(self, page_size: int) -> RecordPage:
        """Fetch the first page of ``page_size`` contracts.

        Raises:
            RecordSourceError: On transport errors, non-2xx responses, or a
                payload that does not match the contract schema.
        """
        client = self._ensure_client()
        try:
            response = await client.get("/contracts", params={"pageSize": page_size, "page": 1})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecordSourceError("http_status", str(exc.response.status_code)) from exc
        except httpx.HTTPError as exc:
            raise RecordSourceError("transport_error", exc.__class__.__name__) from exc

        try:
            page = RecordPage.model_validate_json(response.content)
        except ValidationError as exc:
            raise RecordSourceError("invalid_payload", f"{exc.error_count()} validation errors") from exc

        logger.debug("Fetched contract page", extra={"records": len(page.data), "page_size": page_size})
        return page


class StaticRecordSource:
    """Serve a fixed list of contracts; useful for embedding and tests."""

    def __init__(self, records: Sequence[Contract] = ()) -> None:
        self.records = list(records)
        self.calls = 0

    async def fetch_all(self, page_size: int) -> RecordPage:
        self.calls += 1
        return RecordPage(data=self.records[:page_size], total=len(self.records))
