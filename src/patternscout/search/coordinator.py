"""Search coordinator: the mediator that runs the whole pipeline.

Flow per request:
    check cache -> compute alpha -> run strategies concurrently
    -> (all empty: broad fallback) -> combine -> build recommendations
    -> fuzzy refine (optional) -> sort/truncate -> store cache -> return

Failures degrade: a failing strategy contributes nothing, a failing fuzzy
pass keeps the prior confidence, and anything else is caught at this
boundary and turned into an empty result.

The result cache holds private copies. A hit returns fresh copies whose
ids belong to the request that asked.
"""

from __future__ import annotations

import asyncio
import copy
import json
import time
from collections.abc import Sequence
from dataclasses import dataclass

from patternscout.core.result import CoordinatorError, Err, Ok, Result
from patternscout.core.telemetry import Telemetry, preview
from patternscout.fuzzy.ranker import FuzzyRanker

from .alpha import AlphaTuner
from .builder import RecommendationBuilder, recommendation_id
from .combiner import HybridCombiner
from .models import AlphaResult, MatchRecord, Recommendation, SearchRequest
from .protocols import CacheStore, SearchStrategy


@dataclass
class CoordinatorSettings:
    max_results: int = 5
    use_semantic_search: bool = True
    use_keyword_search: bool = True
    use_hybrid_search: bool = True
    use_fuzzy_refinement: bool = True
    result_cache_ttl: float = 1800.0


def build_cache_key(request: SearchRequest) -> str:
    """Key over query text, sorted categories, max results and language."""
    options = {
        "categories": sorted(request.categories) if request.categories else None,
        "maxResults": request.max_results,
        "programmingLanguage": request.programming_language,
    }
    return f"search:{request.query}:{json.dumps(options, sort_keys=True)}"


def restamp(
    recommendations: Sequence[Recommendation], request: SearchRequest
) -> list[Recommendation]:
    """Independent copies of cached recommendations, re-identified for `request`."""
    fresh = copy.deepcopy(list(recommendations))
    for recommendation in fresh:
        recommendation.request_id = request.id
        recommendation.id = recommendation_id(request.id, recommendation.pattern.id)
    return fresh


class SearchCoordinator:
    """Orchestrates alpha tuning, strategies, fusion, expansion and refinement."""

    def __init__(
        self,
        *,
        semantic: SearchStrategy | None,
        keyword: SearchStrategy | None,
        builder: RecommendationBuilder,
        cache: CacheStore | None = None,
        tuner: AlphaTuner | None = None,
        combiner: HybridCombiner | None = None,
        ranker: FuzzyRanker | None = None,
        settings: CoordinatorSettings | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._semantic = semantic
        self._keyword = keyword
        self._builder = builder
        self._cache = cache
        self._tuner = tuner or AlphaTuner()
        self._settings = settings or CoordinatorSettings()
        self._telemetry = telemetry or Telemetry.for_component("search")
        self._combiner = combiner or HybridCombiner(telemetry=self._telemetry.child("combiner"))
        self._ranker = ranker or FuzzyRanker(telemetry=self._telemetry.child("fuzzy"))

    @property
    def settings(self) -> CoordinatorSettings:
        return self._settings

    async def search(self, request: SearchRequest) -> list[Recommendation]:
        """Run a search; any failure yields an empty list."""
        match await self.search_safe(request):
            case Ok(recommendations):
                return recommendations
            case Err(_):
                return []

    async def search_safe(
        self, request: SearchRequest
    ) -> Result[list[Recommendation], CoordinatorError]:
        started = time.perf_counter()
        try:
            with self._telemetry.span("search", query_length=len(request.query)):
                return Ok(await self._run(request, started))
        except Exception as exc:
            self._telemetry.logger.error(
                "search failed after %.1fms (query=%r, request_id=%s): %s",
                (time.perf_counter() - started) * 1000.0,
                preview(request.query),
                request.id,
                exc,
                exc_info=True,
            )
            return Err(
                CoordinatorError(
                    "Search failed",
                    context={"request_id": request.id, "error": str(exc)},
                )
            )

    async def _run(self, request: SearchRequest, started: float) -> list[Recommendation]:
        if not request.query.strip():
            self._telemetry.logger.debug("Blank query; returning no recommendations")
            return []

        key = build_cache_key(request)
        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached is not None:
                self._telemetry.logger.debug(
                    "Cache hit (query=%r, results=%d)", preview(request.query), len(cached)
                )
                return restamp(cached, request)

        matches = await self.match(request)
        if not matches:
            self._telemetry.logger.warning("No matches found (query=%r)", preview(request.query))
            return []

        recommendations = await self._builder.build(matches, request)
        if self._settings.use_fuzzy_refinement:
            self._ranker.refine(recommendations, request.query)

        limit = request.max_results or self._settings.max_results
        recommendations.sort(key=lambda r: (-r.confidence, r.pattern.name))
        final = recommendations[:limit]
        for rank, recommendation in enumerate(final, start=1):
            recommendation.rank = rank

        if self._cache is not None:
            await self._cache.set(key, copy.deepcopy(final), self._settings.result_cache_ttl)

        self._telemetry.completed(
            "search",
            request.query,
            started,
            matches=len(matches),
            built=len(recommendations),
            returned=len(final),
        )
        return final

    async def match(self, request: SearchRequest) -> list[MatchRecord]:
        """Strategies, broad fallback and fusion; no recommendation building."""
        alpha = self._tuner.tune(request.query)
        self._telemetry.logger.debug(
            "Alpha %s: semantic=%.3f keyword=%.3f",
            alpha.query_type,
            alpha.semantic_weight,
            alpha.keyword_weight,
        )

        semantic_matches, keyword_matches = await self._gather(request, broad=False)
        if not semantic_matches and not keyword_matches:
            self._telemetry.logger.info(
                "No primary matches; running broad search (query=%r)", preview(request.query)
            )
            semantic_matches, keyword_matches = await self._gather(request, broad=True)

        return self._fuse(semantic_matches, keyword_matches, alpha)

    async def _gather(
        self, request: SearchRequest, *, broad: bool
    ) -> tuple[list[MatchRecord], list[MatchRecord]]:
        semantic = self._semantic if self._settings.use_semantic_search else None
        keyword = self._keyword if self._settings.use_keyword_search else None
        return await asyncio.gather(
            self._run_strategy(semantic, request, broad),
            self._run_strategy(keyword, request, broad),
        )

    async def _run_strategy(
        self, strategy: SearchStrategy | None, request: SearchRequest, broad: bool
    ) -> list[MatchRecord]:
        if strategy is None:
            return []
        started = time.perf_counter()
        try:
            if broad:
                return await strategy.broad_search(request)
            return await strategy.search(request)
        except Exception as exc:
            operation = f"{type(strategy).__name__}.{'broad_search' if broad else 'search'}"
            self._telemetry.failure(operation, request.query, started, exc)
            return []

    def _fuse(
        self,
        semantic_matches: Sequence[MatchRecord],
        keyword_matches: Sequence[MatchRecord],
        alpha: AlphaResult,
    ) -> list[MatchRecord]:
        if self._settings.use_hybrid_search:
            return self._combiner.combine([*semantic_matches, *keyword_matches], alpha)

        weighted = [
            *self._combiner.apply_weight(semantic_matches, alpha.semantic_weight),
            *self._combiner.apply_weight(keyword_matches, alpha.keyword_weight),
        ]
        return self._combiner.best_per_pattern(weighted)


__all__ = ["CoordinatorSettings", "SearchCoordinator", "build_cache_key", "restamp"]
