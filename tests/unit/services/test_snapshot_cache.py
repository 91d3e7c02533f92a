"""Unit tests for the record snapshot cache."""

import asyncio

import pytest

from contract_search.adapters.record_source import StaticRecordSource
from contract_search.domain.model import RecordPage
from contract_search.errors import RecordSourceError
from contract_search.search.engine import SearchEngine
from contract_search.services.snapshot_cache import SnapshotCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FailingSource:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def fetch_all(self, page_size: int) -> RecordPage:
        self.calls += 1
        raise self.error


class GatedSource(StaticRecordSource):
    """Static source that blocks until the test opens the gate."""

    def __init__(self, records) -> None:
        super().__init__(records)
        self.gate = asyncio.Event()

    async def fetch_all(self, page_size: int) -> RecordPage:
        await self.gate.wait()
        return await super().fetch_all(page_size)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_snapshot_fetched_once_within_ttl(settings, record_source):
    clock = FakeClock()
    cache = SnapshotCache(settings, record_source, SearchEngine(settings), clock=clock)

    await cache.ensure_fresh()
    clock.now += settings.snapshot_ttl_seconds - 1
    index = await cache.ensure_fresh()

    assert record_source.calls == 1
    assert len(index) == 3
    assert cache.is_fresh


@pytest.mark.unit
@pytest.mark.asyncio
async def test_snapshot_refetched_after_ttl_but_index_kept_when_unchanged(settings, record_source):
    clock = FakeClock()
    engine = SearchEngine(settings)
    cache = SnapshotCache(settings, record_source, engine, clock=clock)

    first = await cache.ensure_fresh()
    clock.now += settings.snapshot_ttl_seconds
    second = await cache.ensure_fresh()

    assert record_source.calls == 2
    assert cache.rebuild_count == 1
    assert second is first


@pytest.mark.unit
@pytest.mark.asyncio
async def test_changed_snapshot_triggers_rebuild(settings, record_source, contract_factory):
    engine = SearchEngine(settings)
    cache = SnapshotCache(settings, record_source, engine)

    await cache.ensure_fresh()
    record_source.records.append(contract_factory(9, title="Seguro de frota"))
    cache.invalidate()
    index = await cache.ensure_fresh()

    assert cache.rebuild_count == 2
    assert len(index) == 4
    assert engine.search("frota").total_results == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_fetch_failure_keeps_previous_index(settings, record_source):
    engine = SearchEngine(settings)
    cache = SnapshotCache(settings, record_source, engine)
    previous = await cache.ensure_fresh()

    cache.source = FailingSource(RecordSourceError("http_status", "500"))
    cache.invalidate()
    with pytest.raises(RecordSourceError):
        await cache.ensure_fresh()

    assert engine.index is previous
    assert not cache.is_loading
    assert not cache.has_snapshot


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_source_errors_are_wrapped(settings):
    cache = SnapshotCache(settings, FailingSource(ValueError("bad")), SearchEngine(settings))

    with pytest.raises(RecordSourceError) as exc_info:
        await cache.ensure_fresh()

    assert exc_info.value.reason == "unexpected_error:ValueError"
    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_is_loading_while_fetch_in_flight_and_callers_share_one_fetch(settings, contracts):
    source = GatedSource(contracts)
    cache = SnapshotCache(settings, source, SearchEngine(settings))

    first = asyncio.create_task(cache.ensure_fresh())
    second = asyncio.create_task(cache.ensure_fresh())
    await asyncio.sleep(0)

    assert cache.is_loading

    source.gate.set()
    await asyncio.gather(first, second)

    assert not cache.is_loading
    assert source.calls == 1
    assert cache.fetch_count == 1
