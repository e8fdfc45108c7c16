"""Dense similarity search through an embedding provider and a vector index."""

from __future__ import annotations

import time
from collections.abc import Iterable

from patternscout.core.result import EmbeddingError, Err, Ok, Result, StrategyError
from patternscout.core.telemetry import Telemetry
from patternscout.embedding.hashing import DEFAULT_DIMENSION, hash_embedding

from .models import MatchMetadata, MatchRecord, SearchRequest, VectorHit
from .protocols import CacheStore, EmbeddingProvider, PatternStore, VectorIndex

EMBEDDING_CACHE_PREFIX = "embedding:"


def similarity_reason(score: float) -> str:
    return f"Semantic similarity: {score * 100:.1f}%"


class SemanticSearchHandler:
    """Embeds the query, asks the vector index for neighbours, resolves patterns.

    Embedding failures never surface: the handler falls back to a
    deterministic hash pseudo-embedding and keeps searching.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        index: VectorIndex,
        store: PatternStore,
        *,
        cache: CacheStore | None = None,
        max_results: int = 5,
        fetch_factor: int = 2,
        min_confidence: float = 0.05,
        broad_search_threshold: float = 0.01,
        embedding_ttl: float = 3600.0,
        fallback_dimension: int = DEFAULT_DIMENSION,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._provider = provider
        self._index = index
        self._store = store
        self._cache = cache
        self._max_results = max_results
        self._fetch_factor = fetch_factor
        self._min_confidence = min_confidence
        self._broad_threshold = broad_search_threshold
        self._embedding_ttl = embedding_ttl
        self._fallback_dimension = fallback_dimension
        self._telemetry = telemetry or Telemetry.for_component("search.semantic")

    @property
    def max_results(self) -> int:
        return self._max_results

    async def search(self, request: SearchRequest) -> list[MatchRecord]:
        return (await self.search_safe(request)).unwrap_or([])

    async def search_safe(self, request: SearchRequest) -> Result[list[MatchRecord], StrategyError]:
        return await self._run(
            "semantic.search",
            request,
            categories=request.categories,
            threshold=self._min_confidence,
        )

    async def broad_search(self, request: SearchRequest) -> list[MatchRecord]:
        return (await self.broad_search_safe(request)).unwrap_or([])

    async def broad_search_safe(
        self, request: SearchRequest
    ) -> Result[list[MatchRecord], StrategyError]:
        return await self._run(
            "semantic.broad_search",
            request,
            categories=None,
            threshold=self._broad_threshold,
        )

    def fallback_dimension(self) -> int:
        """Width of the hash fallback: the index's width once known, else the configured one."""
        indexed = getattr(self._index, "dimension", None)
        return indexed or self._fallback_dimension

    async def embed_query(self, query: str) -> list[float]:
        """Return the query embedding, consulting the cache before the provider."""
        key = f"{EMBEDDING_CACHE_PREFIX}{query}"
        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached:
                return list(cached)

        started = time.perf_counter()
        try:
            vector = await self._embed_with_provider(query)
        except Exception as exc:
            self._telemetry.failure("semantic.embed", query, started, exc)
            return hash_embedding(query, self.fallback_dimension())

        if self._cache is not None:
            await self._cache.set(key, vector, self._embedding_ttl)
        return vector

    async def _embed_with_provider(self, query: str) -> list[float]:
        provider = self._provider
        if not provider.is_ready():
            raise EmbeddingError("Embedding provider not ready", context={"provider": provider.name})
        vector = await provider.embed(query)
        if not vector:
            raise EmbeddingError(
                "Embedding provider returned an empty vector", context={"provider": provider.name}
            )
        return [float(value) for value in vector]

    async def _run(
        self,
        operation: str,
        request: SearchRequest,
        *,
        categories: Iterable[str] | None,
        threshold: float,
    ) -> Result[list[MatchRecord], StrategyError]:
        started = time.perf_counter()
        limit = request.fetch_limit(self._max_results, self._fetch_factor)
        with self._telemetry.span(operation, query_length=len(request.query)):
            try:
                embedding = await self.embed_query(request.query)
                hits = await self._index.nearest_neighbors(embedding, categories, limit)
                matches = await self._resolve(hits, threshold)
            except Exception as exc:
                self._telemetry.failure(operation, request.query, started, exc)
                return Err(
                    StrategyError(
                        "Semantic search failed",
                        context={"operation": operation, "error": str(exc)},
                    )
                )

        matches.sort(key=lambda m: (-m.confidence, m.pattern.name))
        matches = matches[:limit]
        self._telemetry.completed(operation, request.query, started, results=len(matches))
        return Ok(matches)

    async def _resolve(self, hits: list[VectorHit], threshold: float) -> list[MatchRecord]:
        kept = [hit for hit in hits if hit.score >= threshold]
        if not kept:
            return []

        patterns = await self._store.get_patterns(hit.id for hit in kept)
        matches: list[MatchRecord] = []
        for hit in kept:
            pattern = patterns.get(hit.id)
            if pattern is None:
                self._telemetry.logger.debug("Vector hit %s has no pattern record; skipping", hit.id)
                continue
            score = max(0.0, min(1.0, hit.score))
            matches.append(
                MatchRecord(
                    pattern=pattern.summary(),
                    confidence=score,
                    origin="semantic",
                    reasons=[similarity_reason(score)],
                    metadata=MatchMetadata(final_score=score, semantic_score=score),
                )
            )
        return matches


__all__ = ["EMBEDDING_CACHE_PREFIX", "SemanticSearchHandler", "similarity_reason"]
