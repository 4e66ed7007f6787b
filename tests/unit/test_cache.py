"""
Unit tests for the corpus snapshot cache.
"""

import asyncio

import pytest
from myth_parallels.cache import SnapshotCache, build_snapshot
from myth_parallels.errors import UpstreamError

from fakes import FakeMythStore, make_myth

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now
    
    def __call__(self) -> float:
        return self.now


class TestBuildSnapshot:
    
    def test_entries_and_index(self, flood_corpus):
        snapshot = build_snapshot(flood_corpus, title_boost=3, timestamp=5.0)
        assert len(snapshot) == 3
        assert snapshot.timestamp == 5.0
        assert snapshot.title_boost == 3
        assert [e.record.id for e in snapshot.entries] == [1, 2, 3]
        assert snapshot.get(2).record.title == "Noah's Ark"
        assert snapshot.get(99) is None
    
    def test_documents_built_with_boost(self):
        snapshot = build_snapshot([make_myth(1, title="Flood")], title_boost=3, timestamp=0.0)
        assert snapshot.get(1).document == "flood flood flood"


class TestSnapshotCache:
    
    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, flood_store):
        cache = SnapshotCache(flood_store, ttl_seconds=300, clock=FakeClock())
        first = await cache.get_snapshot(3)
        second = await cache.get_snapshot(3)
        assert first is second
        assert flood_store.fetch_all_calls == 1
    
    @pytest.mark.asyncio
    async def test_rebuild_after_ttl(self, flood_store):
        clock = FakeClock()
        cache = SnapshotCache(flood_store, ttl_seconds=300, clock=clock)
        first = await cache.get_snapshot(3)
        
        clock.now += 299
        assert await cache.get_snapshot(3) is first
        
        clock.now += 1  # age == ttl is stale
        second = await cache.get_snapshot(3)
        assert second is not first
        assert flood_store.fetch_all_calls == 2
    
    @pytest.mark.asyncio
    async def test_invalidate_forces_rebuild(self, flood_store):
        cache = SnapshotCache(flood_store, clock=FakeClock())
        await cache.get_snapshot(3)
        cache.invalidate()
        assert cache.peek() is None
        await cache.get_snapshot(3)
        assert flood_store.fetch_all_calls == 2
    
    def test_invalidate_empty_cache_is_noop(self, flood_store):
        cache = SnapshotCache(flood_store)
        cache.invalidate()
        assert cache.peek() is None
        assert flood_store.fetch_all_calls == 0
    
    @pytest.mark.asyncio
    async def test_different_title_boost_rebuilds(self, flood_store):
        cache = SnapshotCache(flood_store, clock=FakeClock())
        await cache.get_snapshot(3)
        snapshot = await cache.get_snapshot(2)
        assert snapshot.title_boost == 2
        assert snapshot.get(1).document.startswith("great flood great flood ")
        assert flood_store.fetch_all_calls == 2
    
    @pytest.mark.asyncio
    async def test_sees_new_records_after_invalidate(self, flood_store):
        cache = SnapshotCache(flood_store, clock=FakeClock())
        await cache.get_snapshot(3)
        flood_store.records.append(make_myth(4, title="Manu and the Fish"))
        
        assert (await cache.get_snapshot(3)).get(4) is None
        cache.invalidate()
        assert (await cache.get_snapshot(3)).get(4) is not None
    
    @pytest.mark.asyncio
    async def test_fetch_failure_propagates_and_caches_nothing(self, flood_store):
        flood_store.fail_fetch = True
        cache = SnapshotCache(flood_store)
        with pytest.raises(UpstreamError):
            await cache.get_snapshot(3)
        assert cache.peek() is None
        
        flood_store.fail_fetch = False
        assert len(await cache.get_snapshot(3)) == 3
    
    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_rebuild(self, flood_store):
        flood_store.fetch_delay = 0.05
        cache = SnapshotCache(flood_store)
        first, second = await asyncio.gather(cache.get_snapshot(3), cache.get_snapshot(3))
        assert first is second
        assert flood_store.fetch_all_calls == 1
    
    @pytest.mark.asyncio
    async def test_cancelled_requester_does_not_cancel_rebuild(self, flood_store):
        flood_store.fetch_delay = 0.1
        cache = SnapshotCache(flood_store)
        
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(cache.get_snapshot(3), timeout=0.01)
        
        await asyncio.sleep(0.2)
        assert cache.peek() is not None
        assert len(cache.peek()) == 3
        assert flood_store.fetch_all_calls == 1
    
    @pytest.mark.asyncio
    async def test_invalidate_during_rebuild_discards_result(self, flood_store):
        flood_store.fetch_delay = 0.05
        cache = SnapshotCache(flood_store)
        
        pending = asyncio.ensure_future(cache.get_snapshot(3))
        await asyncio.sleep(0.01)
        cache.invalidate()
        
        snapshot = await pending
        assert len(snapshot) == 3  # the waiter still gets an answer
        assert cache.peek() is None
