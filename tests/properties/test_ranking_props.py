"""Property-based tests for weights, fusion and fuzzy refinement using Hypothesis.

These tests verify core invariants of the ranking pipeline:
- Fusion weights lie in [0.1, 0.9] and sum to 1 for any query text
- Fused confidences stay in [0, 1] and pattern ids stay unique
- Fuzzy refinement always yields a value in [0, 1]
"""
from __future__ import annotations

import asyncio

from hypothesis import given, settings
from hypothesis import strategies as st

from patternscout.catalog import load_catalog
from patternscout.fuzzy.defuzzification import centroid, max_membership
from patternscout.fuzzy.inference import FuzzyInferenceEngine, FuzzyScore
from patternscout.fuzzy.membership import FuzzyInput
from patternscout.search.alpha import tune
from patternscout.search.builder import RecommendationBuilder
from patternscout.search.combiner import HybridCombiner, fuse_scores
from patternscout.search.coordinator import CoordinatorSettings, SearchCoordinator
from patternscout.search.models import MatchMetadata, MatchRecord, PatternSummary, SearchRequest
from patternscout.store.memory import InMemoryPatternStore

EPSILON = 1e-9

# === Strategies ===

_SURROGATE_CATEGORIES: tuple[str, ...] = ("Cs",)
query_strategy = st.text(
    alphabet=st.characters(blacklist_categories=_SURROGATE_CATEGORIES),  # type: ignore[arg-type]
    min_size=0,
    max_size=300,
)
unit = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)
pattern_ids = st.sampled_from(["singleton", "observer", "strategy", "adapter", "facade"])


@st.composite
def match_records(draw: st.DrawFn) -> MatchRecord:
    pattern_id = draw(pattern_ids)
    origin = draw(st.sampled_from(["semantic", "keyword"]))
    score = draw(unit)
    pattern = PatternSummary(pattern_id, pattern_id.title(), "Behavioral", "desc")
    if origin == "semantic":
        metadata = MatchMetadata(final_score=score, semantic_score=score)
    else:
        metadata = MatchMetadata(final_score=score, keyword_score=score * 10)
    return MatchRecord(pattern, score, origin, ["reason"], metadata)


# === Property Tests ===


@given(query=query_strategy)
@settings(max_examples=200)
def test_weights_bounded_and_sum_to_one(query: str) -> None:
    result = tune(query)
    assert 0.1 - EPSILON <= result.semantic_weight <= 0.9 + EPSILON
    assert 0.1 - EPSILON <= result.keyword_weight <= 0.9 + EPSILON
    assert abs(result.semantic_weight + result.keyword_weight - 1.0) < EPSILON
    assert 0.0 <= result.confidence <= 0.9


@given(semantic=unit, keyword=unit, weight=st.floats(min_value=0.1, max_value=0.9))
@settings(max_examples=200)
def test_fused_score_bounded(semantic: float, keyword: float, weight: float) -> None:
    fused = fuse_scores(semantic, keyword, weight, 1.0 - weight)
    assert 0.0 <= fused <= 1.0
    if semantic > 0 and keyword > 0:
        assert min(semantic, keyword) - EPSILON <= fused <= max(semantic, keyword) + EPSILON


@given(records=st.lists(match_records(), max_size=20), query=query_strategy)
@settings(max_examples=200)
def test_combine_unique_and_sorted(records: list[MatchRecord], query: str) -> None:
    combined = HybridCombiner().combine(records, tune(query))
    ids = [m.pattern.id for m in combined]
    assert len(ids) == len(set(ids))
    assert set(ids) == {r.pattern.id for r in records}
    confidences = [m.confidence for m in combined]
    assert all(0.0 <= c <= 1.0 for c in confidences)
    assert confidences == sorted(confidences, reverse=True)


@given(
    semantic=unit,
    keyword=unit,
    fit=unit,
    complexity=st.sampled_from(["Low", "Medium", "High", "unknown", ""]),
)
@settings(max_examples=200)
def test_fuzzy_value_bounded(semantic: float, keyword: float, fit: float, complexity: str) -> None:
    output = FuzzyInferenceEngine().evaluate(FuzzyInput(semantic, keyword, complexity, fit))
    assert all(0.0 <= degree <= 1.0 for degree in output.score.ordered())
    for result in (centroid(output.score), max_membership(output.score)):
        assert 0.0 <= result.value <= 1.0
        assert 0.0 <= result.confidence <= 0.95


@given(low=unit, medium=unit, high=unit, very_high=unit)
@settings(max_examples=200)
def test_centroid_within_representatives(
    low: float, medium: float, high: float, very_high: float
) -> None:
    result = centroid(FuzzyScore(low, medium, high, very_high))
    if low + medium + high + very_high > 0:
        assert 0.15 - EPSILON <= result.value <= 0.95 + EPSILON
    else:
        assert result.value == 0.5


class _FixedStrategy:
    def __init__(self, matches: list[MatchRecord]) -> None:
        self._matches = matches

    async def search(self, request: SearchRequest) -> list[MatchRecord]:
        return list(self._matches)

    async def broad_search(self, request: SearchRequest) -> list[MatchRecord]:
        return []


_STORE: InMemoryPatternStore = load_catalog()


@given(
    records=st.lists(match_records(), min_size=1, max_size=15),
    limit=st.integers(min_value=1, max_value=6),
)
@settings(max_examples=50, deadline=None)
def test_search_output_sorted_and_limited(records: list[MatchRecord], limit: int) -> None:
    semantic = [r for r in records if r.origin == "semantic"]
    keyword = [r for r in records if r.origin == "keyword"]
    coordinator = SearchCoordinator(
        semantic=_FixedStrategy(semantic),
        keyword=_FixedStrategy(keyword),
        builder=RecommendationBuilder(_STORE),
        settings=CoordinatorSettings(max_results=10),
    )

    results = asyncio.run(coordinator.search(SearchRequest(query="pattern", max_results=limit)))

    assert len(results) <= limit
    assert [r.rank for r in results] == list(range(1, len(results) + 1))
    confidences = [r.confidence for r in results]
    assert confidences == sorted(confidences, reverse=True)
    assert all(0.0 <= c <= 1.0 for c in confidences)
    assert len({r.pattern.id for r in results}) == len(results)
