"""Hybrid retrieval and ranking pipeline.

Startup wiring lives in `patternscout.search.factory` and is imported
explicitly, since it depends on the store and catalog packages.
"""

from __future__ import annotations

from .alpha import AlphaTuner, analyze_query, tune
from .builder import RecommendationBuilder, contextual_fit
from .combiner import HybridCombiner, fuse_scores
from .coordinator import CoordinatorSettings, SearchCoordinator, build_cache_key
from .keyword import KeywordSearchHandler, tokenize
from .models import (
    AlphaResult,
    MatchRecord,
    QueryAnalysis,
    Recommendation,
    SearchRequest,
)
from .semantic import SemanticSearchHandler

__all__ = [
    "AlphaResult",
    "AlphaTuner",
    "CoordinatorSettings",
    "HybridCombiner",
    "KeywordSearchHandler",
    "MatchRecord",
    "QueryAnalysis",
    "Recommendation",
    "RecommendationBuilder",
    "SearchCoordinator",
    "SearchRequest",
    "SemanticSearchHandler",
    "analyze_query",
    "build_cache_key",
    "contextual_fit",
    "fuse_scores",
    "tokenize",
    "tune",
]
