"""Reference collaborator adapters: pattern store, vector indexes and caches."""

from __future__ import annotations

from .cache import CacheMetrics, GuardedCache, MemoryCache
from .lance import LanceVectorIndex, load_lancedb_dependencies
from .memory import InMemoryPatternStore
from .vector import MemoryVectorIndex, compose_embedding_text, index_patterns

__all__ = [
    "CacheMetrics",
    "GuardedCache",
    "InMemoryPatternStore",
    "LanceVectorIndex",
    "MemoryCache",
    "MemoryVectorIndex",
    "compose_embedding_text",
    "index_patterns",
    "load_lancedb_dependencies",
]
