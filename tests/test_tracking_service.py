"""
Tests for driving a tracking session against a shipment source
"""
import asyncio

import pytest

from config import UPSTREAM_FAILURE_MESSAGE
from errors import UpstreamFailure
from tracking_service import ShipmentSource, StoreSource, track
from tracking_session import SessionState, TrackingSession


class FailingSource(ShipmentSource):
    name = "failing"

    def __init__(self):
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        raise UpstreamFailure("Shipments API unavailable", detail="connection refused")


class BrokenSource(ShipmentSource):
    name = "broken"

    async def fetch_all(self):
        raise RuntimeError("boom")


class CountingSource(StoreSource):
    def __init__(self, store):
        super().__init__(store)
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        return await super().fetch_all()


@pytest.mark.asyncio
async def test_track_loaded(store):
    session = await track(TrackingSession(), StoreSource(store), "ship-zx98yu76", delay=0)
    assert session.state == SessionState.LOADED
    assert session.results[0].tracking_number == "SHIP-ZX98YU76"


@pytest.mark.asyncio
async def test_track_empty(store):
    session = await track(TrackingSession(), StoreSource(store), "SHIP-NOPE0000", delay=0)
    assert session.state == SessionState.EMPTY


@pytest.mark.asyncio
async def test_blank_query_skips_fetch(store):
    source = CountingSource(store)
    session = await track(TrackingSession(), source, "  ", delay=0)
    assert session.state == SessionState.ERRORED
    assert source.calls == 0


@pytest.mark.asyncio
async def test_upstream_failure():
    source = FailingSource()
    session = await track(TrackingSession(), source, "SHIP-AB12CD34", delay=0)
    assert session.state == SessionState.ERRORED
    assert session.error_kind == "upstream"
    assert source.calls == 1


@pytest.mark.asyncio
async def test_unexpected_source_error_ends_in_errored_state():
    session = await track(TrackingSession(), BrokenSource(), "SHIP-AB12CD34", delay=0)
    assert session.state == SessionState.ERRORED
    assert session.error_kind == "upstream"
    assert session.message == UPSTREAM_FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_later_query_wins(store):
    session = TrackingSession(mode="substring")
    first = asyncio.ensure_future(track(session, StoreSource(store), "SHIP-AB12CD34", delay=0.05))
    await asyncio.sleep(0)
    await track(session, StoreSource(store), "ZX98", delay=0)
    await first

    assert session.query == "ZX98"
    assert [r.tracking_number for r in session.results] == ["SHIP-ZX98YU76"]


@pytest.mark.asyncio
async def test_fresh_snapshot_per_lookup(store):
    source = CountingSource(store)
    session = TrackingSession()
    await track(session, source, "SHIP-AB12CD34", delay=0)
    store.delete("SHIP-AB12CD34")
    await track(session, source, "SHIP-AB12CD34", delay=0)

    assert source.calls == 2
    assert session.state == SessionState.EMPTY
