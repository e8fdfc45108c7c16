"""Collaborator protocols consumed by the search pipeline.

The pipeline owns no storage, index or cache of its own; it talks to these
capability interfaces. Reference adapters live in `patternscout.store` and
`patternscout.embedding`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from .models import (
    DetailedPattern,
    MatchRecord,
    PatternImplementation,
    PatternRelationship,
    PatternSummary,
    SearchRequest,
    VectorHit,
)


class PatternStore(Protocol):
    """Structured lookup over patterns, implementations and relationships."""

    async def list_patterns(
        self, categories: Iterable[str] | None = None
    ) -> list[PatternSummary]: ...

    async def get_pattern(self, pattern_id: str) -> DetailedPattern | None: ...

    async def get_patterns(self, pattern_ids: Iterable[str]) -> dict[str, DetailedPattern]: ...

    async def get_implementations(
        self, pattern_id: str, language: str | None = None, limit: int | None = None
    ) -> list[PatternImplementation]: ...

    async def get_relationships(
        self, pattern_id: str, types: Iterable[str] | None = None
    ) -> list[PatternRelationship]: ...


class VectorIndex(Protocol):
    """Nearest-neighbour search over pattern embeddings."""

    async def nearest_neighbors(
        self,
        embedding: Sequence[float],
        categories: Iterable[str] | None,
        k: int,
    ) -> list[VectorHit]: ...


class EmbeddingProvider(Protocol):
    """Capability interface for one embedding backend."""

    @property
    def name(self) -> str: ...

    def is_ready(self) -> bool: ...

    async def embed(self, text: str) -> list[float]: ...


class CacheStore(Protocol):
    """Key/value cache with per-entry TTL in seconds."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: float | None = None) -> bool: ...


class SearchStrategy(Protocol):
    """A search strategy exposes a primary and a relaxed broad pass."""

    async def search(self, request: SearchRequest) -> list[MatchRecord]: ...

    async def broad_search(self, request: SearchRequest) -> list[MatchRecord]: ...


__all__ = [
    "CacheStore",
    "EmbeddingProvider",
    "PatternStore",
    "SearchStrategy",
    "VectorIndex",
]
