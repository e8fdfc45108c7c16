"""Numpy-backed vector index and corpus indexing helpers."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from typing import Protocol

import numpy as np

from patternscout.core.console import get_logger
from patternscout.core.result import EmbeddingError
from patternscout.search.models import DetailedPattern, PatternSummary, VectorHit
from patternscout.search.protocols import EmbeddingProvider, PatternStore

logger = get_logger(__name__)


class WritableVectorIndex(Protocol):
    def add(self, pattern_id: str, embedding: Sequence[float], category: str) -> None: ...

    async def nearest_neighbors(
        self,
        embedding: Sequence[float],
        categories: Iterable[str] | None,
        k: int,
    ) -> list[VectorHit]: ...


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row of `matrix` against `query`."""
    norms = np.linalg.norm(matrix, axis=1)
    query_norm = float(np.linalg.norm(query))
    if query_norm == 0.0:
        return np.zeros(matrix.shape[0], dtype=np.float32)
    norms = np.where(norms == 0, 1, norms)
    return (matrix @ query) / (norms * query_norm)


class MemoryVectorIndex:
    """Brute-force cosine index held in a numpy matrix.

    Thread-safe for concurrent adds and searches.
    """

    def __init__(self) -> None:
        self._ids: list[str] = []
        self._categories: list[str] = []
        self._rows: list[np.ndarray] = []
        self._matrix: np.ndarray | None = None
        self._dimension: int | None = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def add(self, pattern_id: str, embedding: Sequence[float], category: str) -> None:
        vector = np.asarray(embedding, dtype=np.float32)
        if vector.ndim != 1 or vector.size == 0:
            raise ValueError("embedding must be a non-empty 1-d vector")

        with self._lock:
            if self._dimension is not None and vector.size != self._dimension:
                raise ValueError(
                    f"Embedding dimension mismatch: {self._dimension} != {vector.size}"
                )
            self._dimension = int(vector.size)
            if pattern_id in self._ids:
                index = self._ids.index(pattern_id)
                self._rows[index] = vector
                self._categories[index] = category
            else:
                self._ids.append(pattern_id)
                self._categories.append(category)
                self._rows.append(vector)
            self._matrix = None

    async def nearest_neighbors(
        self,
        embedding: Sequence[float],
        categories: Iterable[str] | None,
        k: int,
    ) -> list[VectorHit]:
        query = np.asarray(embedding, dtype=np.float32)
        wanted = {c.lower() for c in categories} if categories is not None else None

        with self._lock:
            if not self._ids or k <= 0:
                return []
            if query.size != self._dimension:
                raise ValueError(
                    f"Query dimension mismatch: {self._dimension} != {query.size}"
                )
            if self._matrix is None:
                self._matrix = np.vstack(self._rows)
            matrix = self._matrix
            ids = list(self._ids)
            row_categories = list(self._categories)

        scores = cosine_scores(matrix, query)
        order = np.argsort(-scores, kind="stable")

        hits: list[VectorHit] = []
        for index in order:
            if wanted is not None and row_categories[index].lower() not in wanted:
                continue
            hits.append(VectorHit(id=ids[index], score=float(scores[index])))
            if len(hits) >= k:
                break
        return hits


def compose_embedding_text(pattern: DetailedPattern | PatternSummary) -> str:
    """Text embedded for a pattern: name, category, description and tags."""
    tags = " ".join(pattern.tags)
    return f"{pattern.name} {pattern.category} {pattern.description} {tags}".strip()


async def index_patterns(
    store: PatternStore,
    index: WritableVectorIndex,
    provider: EmbeddingProvider,
    categories: Iterable[str] | None = None,
) -> int:
    """Embed every pattern in `store` and add it to `index`. Returns the count."""
    if not provider.is_ready():
        raise EmbeddingError("Embedding provider not ready", context={"provider": provider.name})

    count = 0
    for pattern in await store.list_patterns(categories):
        vector = await provider.embed(compose_embedding_text(pattern))
        if not vector:
            raise EmbeddingError(
                "Embedding provider returned an empty vector",
                context={"provider": provider.name, "pattern": pattern.id},
            )
        index.add(pattern.id, vector, pattern.category)
        count += 1

    logger.debug("Indexed %d patterns with %s embeddings", count, provider.name)
    return count


__all__ = [
    "MemoryVectorIndex",
    "WritableVectorIndex",
    "compose_embedding_text",
    "cosine_scores",
    "index_patterns",
]
