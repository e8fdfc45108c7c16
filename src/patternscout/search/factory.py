"""Startup wiring: build a SearchCoordinator from AppConfig."""

from __future__ import annotations

from patternscout.catalog import load_catalog
from patternscout.core.config import AppConfig, InfraConfig
from patternscout.core.console import get_logger
from patternscout.core.telemetry import Telemetry, get_tracer
from patternscout.embedding import get_embedding_provider
from patternscout.fuzzy.ranker import FuzzyRanker
from patternscout.store.cache import GuardedCache, MemoryCache
from patternscout.store.lance import LanceVectorIndex
from patternscout.store.vector import MemoryVectorIndex, WritableVectorIndex, index_patterns

from .builder import RecommendationBuilder
from .combiner import HybridCombiner
from .coordinator import CoordinatorSettings, SearchCoordinator
from .keyword import KeywordSearchHandler
from .protocols import CacheStore, EmbeddingProvider, PatternStore, VectorIndex
from .semantic import SemanticSearchHandler

logger = get_logger(__name__)

# Strategies over-fetch so fusion has room before the final truncation.
STRATEGY_FETCH_FACTOR = 2


def _make_index(infra: InfraConfig) -> WritableVectorIndex:
    match infra.vector_backend:
        case "lance":
            return LanceVectorIndex.open(infra.lance_path)
        case _:
            return MemoryVectorIndex()


def coordinator_settings(config: AppConfig) -> CoordinatorSettings:
    search = config.search
    return CoordinatorSettings(
        max_results=search.max_results,
        use_semantic_search=search.use_semantic_search,
        use_keyword_search=search.use_keyword_search,
        use_hybrid_search=search.use_hybrid_search,
        use_fuzzy_refinement=search.use_fuzzy_refinement,
        result_cache_ttl=search.result_cache_ttl,
    )


async def build_coordinator(
    config: AppConfig,
    *,
    store: PatternStore | None = None,
    provider: EmbeddingProvider | None = None,
    index: VectorIndex | None = None,
    cache: CacheStore | None = None,
) -> SearchCoordinator:
    """Assemble the pipeline. Missing collaborators come from config defaults.

    When no index is supplied, a new one is created and the store's patterns
    are embedded into it with the selected provider.
    """
    telemetry = Telemetry.for_component("search", get_tracer(config.infra))
    store = store or load_catalog()
    provider = provider or get_embedding_provider(config.embedding)

    if index is None:
        writable = _make_index(config.infra)
        with telemetry.timed("index_patterns"):
            count = await index_patterns(store, writable, provider)
        logger.debug("Built %s index with %d patterns", config.infra.vector_backend, count)
        index = writable

    if cache is None:
        cache = GuardedCache(MemoryCache(config.cache.max_entries, config.cache.default_ttl))

    search = config.search

    semantic = SemanticSearchHandler(
        provider,
        index,
        store,
        cache=cache,
        max_results=search.max_results,
        fetch_factor=STRATEGY_FETCH_FACTOR,
        min_confidence=search.min_confidence,
        broad_search_threshold=search.broad_search_threshold,
        embedding_ttl=config.embedding.cache_ttl,
        fallback_dimension=config.embedding.dimension,
        telemetry=telemetry.child("semantic"),
    )
    keyword = KeywordSearchHandler(
        store,
        max_results=search.max_results,
        fetch_factor=STRATEGY_FETCH_FACTOR,
        min_confidence=search.min_confidence,
        broad_search_threshold=search.broad_search_threshold,
        telemetry=telemetry.child("keyword"),
    )
    builder = RecommendationBuilder(
        store,
        max_alternatives=config.recommendation.max_alternatives,
        max_examples=config.recommendation.max_examples,
        placeholder_similarity=config.recommendation.placeholder_similarity,
        telemetry=telemetry.child("builder"),
    )

    return SearchCoordinator(
        semantic=semantic,
        keyword=keyword,
        builder=builder,
        cache=cache,
        combiner=HybridCombiner(telemetry=telemetry.child("combiner")),
        ranker=FuzzyRanker(telemetry=telemetry.child("fuzzy")),
        settings=coordinator_settings(config),
        telemetry=telemetry,
    )


__all__ = ["STRATEGY_FETCH_FACTOR", "build_coordinator", "coordinator_settings"]
