"""In-process caches used by the search pipeline.

This module provides:
- MemoryCache: TTL + LRU key/value cache with hit/miss metrics
- GuardedCache: wraps any CacheStore with a per-key in-flight write guard

Write contract of GuardedCache: first writer wins. While a write for a key is
in flight, a second concurrent write for the same key is dropped and `set`
returns False. Writes for different keys never block each other.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Final

from patternscout.core.console import get_logger
from patternscout.search.protocols import CacheStore

logger = get_logger(__name__)

MAX_CACHE_ENTRIES: Final[int] = 1000
DEFAULT_TTL: Final[float] = 3600.0


@dataclass
class CacheMetrics:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    dropped_writes: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "dropped_writes": self.dropped_writes,
            "size": self.size,
            "hit_rate": self.hit_rate,
        }


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class MemoryCache:
    """LRU cache with per-entry expiry.

    Thread-safe for concurrent access.

    Usage:
        cache = MemoryCache(max_entries=100)
        await cache.set("key", value, ttl=60)
        value = await cache.get("key")
    """

    def __init__(
        self,
        max_entries: int = MAX_CACHE_ENTRIES,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock
        self._metrics = CacheMetrics()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get(self, key: str) -> Any | None:
        return self.get_sync(key)

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        self.set_sync(key, value, ttl)
        return True

    def get_sync(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._metrics.misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self._metrics.expirations += 1
                self._metrics.misses += 1
                return None
            self._entries.move_to_end(key)
            self._metrics.hits += 1
            return entry.value

    def set_sync(self, key: str, value: Any, ttl: float | None = None) -> None:
        lifetime = self._default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + lifetime)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                self._metrics.evictions += 1

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def metrics(self) -> CacheMetrics:
        with self._lock:
            self._metrics.size = len(self._entries)
            return CacheMetrics(**vars(self._metrics))


class GuardedCache:
    """CacheStore wrapper enforcing first-writer-wins per key."""

    def __init__(self, inner: CacheStore) -> None:
        self._inner = inner
        self._locks: dict[str, asyncio.Lock] = {}
        self._dropped = 0

    @property
    def inner(self) -> CacheStore:
        return self._inner

    @property
    def dropped_writes(self) -> int:
        return self._dropped

    async def get(self, key: str) -> Any | None:
        return await self._inner.get(key)

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        lock = self._locks.setdefault(key, asyncio.Lock())
        if lock.locked():
            self._dropped += 1
            logger.debug("Dropped concurrent cache write for key %r", key[:80])
            return False

        async with lock:
            try:
                return await self._inner.set(key, value, ttl)
            finally:
                if self._locks.get(key) is lock:
                    del self._locks[key]

    def metrics(self) -> CacheMetrics:
        inner_metrics = getattr(self._inner, "metrics", None)
        metrics = inner_metrics() if callable(inner_metrics) else CacheMetrics()
        metrics.dropped_writes += self._dropped
        return metrics


__all__ = [
    "DEFAULT_TTL",
    "MAX_CACHE_ENTRIES",
    "CacheMetrics",
    "GuardedCache",
    "MemoryCache",
]
