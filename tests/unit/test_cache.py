"""Tests for store/cache.py - TTL/LRU cache and the write guard."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from patternscout.store.cache import GuardedCache, MemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class SlowCache(MemoryCache):
    """MemoryCache whose writes yield to the event loop first."""

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        await asyncio.sleep(0.01)
        return await super().set(key, value, ttl)


class TestMemoryCache:
    @pytest.mark.asyncio
    async def test_set_and_get(self) -> None:
        cache = MemoryCache()
        assert await cache.set("k", [1, 2]) is True
        assert await cache.get("k") == [1, 2]
        assert await cache.get("missing") is None

    def test_ttl_expiry(self) -> None:
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set_sync("k", "v", ttl=10)

        clock.now = 9.9
        assert cache.get_sync("k") == "v"
        clock.now = 10.0
        assert cache.get_sync("k") is None
        assert cache.metrics().expirations == 1

    def test_default_ttl(self) -> None:
        clock = FakeClock()
        cache = MemoryCache(default_ttl=5, clock=clock)
        cache.set_sync("k", "v")
        clock.now = 6
        assert cache.get_sync("k") is None

    def test_lru_eviction(self) -> None:
        cache = MemoryCache(max_entries=2)
        cache.set_sync("a", 1)
        cache.set_sync("b", 2)
        cache.get_sync("a")
        cache.set_sync("c", 3)

        assert cache.get_sync("b") is None
        assert cache.get_sync("a") == 1
        assert cache.get_sync("c") == 3
        assert cache.metrics().evictions == 1

    def test_metrics(self) -> None:
        cache = MemoryCache()
        cache.set_sync("a", 1)
        cache.get_sync("a")
        cache.get_sync("b")
        metrics = cache.metrics()
        assert metrics.hits == 1
        assert metrics.misses == 1
        assert metrics.size == 1
        assert metrics.hit_rate == pytest.approx(0.5)
        assert metrics.as_dict()["hit_rate"] == pytest.approx(0.5)

    def test_invalidate_and_clear(self) -> None:
        cache = MemoryCache()
        cache.set_sync("a", 1)
        cache.set_sync("b", 2)
        cache.invalidate("a")
        assert cache.get_sync("a") is None
        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            MemoryCache(max_entries=0)


class TestGuardedCache:
    @pytest.mark.asyncio
    async def test_first_writer_wins(self) -> None:
        guarded = GuardedCache(SlowCache())
        first, second = await asyncio.gather(
            guarded.set("k", "first"), guarded.set("k", "second")
        )

        assert (first, second) == (True, False)
        assert await guarded.get("k") == "first"
        assert guarded.dropped_writes == 1
        assert guarded.metrics().dropped_writes == 1

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self) -> None:
        guarded = GuardedCache(SlowCache())
        results = await asyncio.gather(guarded.set("a", 1), guarded.set("b", 2))
        assert results == [True, True]
        assert await guarded.get("a") == 1
        assert await guarded.get("b") == 2

    @pytest.mark.asyncio
    async def test_sequential_writes_overwrite(self) -> None:
        guarded = GuardedCache(MemoryCache())
        await guarded.set("k", "old")
        assert await guarded.set("k", "new") is True
        assert await guarded.get("k") == "new"
        assert guarded.dropped_writes == 0
