"""End-to-end tests over the built-in catalog."""

from __future__ import annotations

import pytest

from conftest import StubStrategy, semantic_match
from patternscout.catalog import load_catalog
from patternscout.core.config import load_config
from patternscout.embedding.hashing import HashEmbeddingProvider
from patternscout.search.builder import RecommendationBuilder
from patternscout.search.coordinator import SearchCoordinator
from patternscout.search.factory import STRATEGY_FETCH_FACTOR, build_coordinator
from patternscout.search.keyword import KeywordSearchHandler
from patternscout.search.models import SearchRequest
from patternscout.store.cache import GuardedCache, MemoryCache
from patternscout.store.memory import InMemoryPatternStore
from patternscout.store.vector import MemoryVectorIndex, index_patterns


class RecordingIndex(MemoryVectorIndex):
    def __init__(self) -> None:
        super().__init__()
        self.requested: list[int] = []

    async def nearest_neighbors(self, embedding, categories, k):  # type: ignore[no-untyped-def]
        self.requested.append(k)
        return await super().nearest_neighbors(embedding, categories, k)


class TestBuiltCoordinator:
    @pytest.mark.asyncio
    async def test_factory_method_query(self) -> None:
        config, _ = load_config()
        coordinator = await build_coordinator(config)

        results = await coordinator.search(
            SearchRequest(query="factory method pattern", max_results=16)
        )

        by_id = {r.pattern.id: r for r in results}
        assert "factory-method" in by_id
        factory = by_id["factory-method"]
        assert factory.confidence > 0.3
        assert factory.justification.fuzzy_reasoning
        assert [r.rank for r in results] == list(range(1, len(results) + 1))
        confidences = [r.confidence for r in results]
        assert confidences == sorted(confidences, reverse=True)

    @pytest.mark.asyncio
    async def test_default_limit_and_language(self) -> None:
        config, _ = load_config()
        coordinator = await build_coordinator(config)

        results = await coordinator.search(
            SearchRequest(query="observer notify subscribers", programming_language="python")
        )

        assert 0 < len(results) <= config.search.max_results
        for rec in results:
            assert all(example.language == "python" for example in rec.implementation.examples)

    @pytest.mark.asyncio
    async def test_repeat_query_served_from_cache(self) -> None:
        config, _ = load_config()
        cache = GuardedCache(MemoryCache())
        coordinator = await build_coordinator(config, cache=cache)
        request = SearchRequest(query="wrap a legacy interface")

        first = await coordinator.search(request)
        hits_before = cache.metrics().hits
        second = await coordinator.search(request)

        assert [r.id for r in first] == [r.id for r in second]
        assert cache.metrics().hits == hits_before + 1

    @pytest.mark.asyncio
    async def test_category_restriction(self) -> None:
        config, _ = load_config()
        coordinator = await build_coordinator(config)

        results = await coordinator.search(
            SearchRequest(query="object interface wrapper", categories=["Structural"])
        )
        assert results
        assert {r.pattern.category for r in results} == {"Structural"}

    @pytest.mark.asyncio
    async def test_strategy_fetch_follows_request(self) -> None:
        config, _ = load_config()
        store = load_catalog()
        provider = HashEmbeddingProvider(config.embedding.dimension)
        index = RecordingIndex()
        await index_patterns(store, index, provider)
        coordinator = await build_coordinator(config, store=store, provider=provider, index=index)

        await coordinator.search(SearchRequest(query="factory method pattern", max_results=12))
        narrow = await coordinator.search(
            SearchRequest(query="factory method pattern", max_results=2)
        )

        assert index.requested == [12 * STRATEGY_FETCH_FACTOR, 2 * STRATEGY_FETCH_FACTOR]
        assert len(narrow) == 2


class TestSemanticLedRanking:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query", ["single instance global access", "ensure only one instance of a class"]
    )
    async def test_strong_semantic_match_wins(
        self, catalog_store: InMemoryPatternStore, query: str
    ) -> None:
        singleton = await catalog_store.get_pattern("singleton")
        assert singleton is not None
        semantic = StubStrategy([semantic_match(singleton.summary(), 0.85)])
        coordinator = SearchCoordinator(
            semantic=semantic,
            keyword=KeywordSearchHandler(catalog_store),
            builder=RecommendationBuilder(catalog_store),
            cache=MemoryCache(),
        )

        results = await coordinator.search(SearchRequest(query=query))

        assert results[0].pattern.id == "singleton"
        assert results[0].rank == 1
        assert results[0].confidence > 0.5
        assert results[0].semantic_score == pytest.approx(0.85)
        for other in results[1:]:
            assert other.confidence < results[0].confidence
