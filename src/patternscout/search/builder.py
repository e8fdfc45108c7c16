"""Expansion of ranked matches into full recommendation records."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Final
from uuid import NAMESPACE_URL, uuid5

from patternscout.core.telemetry import Telemetry

from .keyword import normalize_keyword_score
from .models import (
    AlternativePattern,
    CodeExample,
    DetailedPattern,
    ImplementationGuidance,
    Justification,
    MatchRecord,
    PatternImplementation,
    Recommendation,
    SearchRequest,
    TestingGuidance,
    clamp,
)
from .protocols import PatternStore

IMPLEMENTATION_STEPS: Final[tuple[str, ...]] = (
    "Analyze your current code structure",
    "Identify where the pattern applies",
    "Implement the pattern following the examples",
    "Test the implementation",
    "Refactor as needed",
)
UNIT_TEST_HINTS: Final[tuple[str, ...]] = ("Test pattern implementation", "Test edge cases")
INTEGRATION_TEST_HINTS: Final[tuple[str, ...]] = ("Test pattern interaction with existing code",)
TEST_SCENARIOS: Final[tuple[str, ...]] = ("Normal operation", "Error conditions", "Boundary cases")

ALTERNATIVE_TYPES: Final[tuple[str, ...]] = ("alternative", "similar")
CREATION_CUES: Final[tuple[str, ...]] = ("create", "factory")
DEFAULT_PRIMARY_REASON = "Pattern matches query requirements"
UNKNOWN_PATTERN = "Unknown Pattern"
UNKNOWN_CATEGORY = "Unknown"


def recommendation_id(request_id: str, pattern_id: str) -> str:
    """Stable id: the same request and pattern always map to the same id."""
    return uuid5(NAMESPACE_URL, f"{request_id}:{pattern_id}").hex


def contextual_fit(pattern: DetailedPattern, request: SearchRequest) -> float:
    """Heuristic fit of a pattern to the request's context, in [0, 1]."""
    fit = 0.5
    query = request.query.lower()

    language = request.programming_language
    if language:
        stem = language.lower()[:3]
        has_language = any(stem in tag.lower() for tag in pattern.tags)
        fit += 0.3 if has_language else -0.1

    if any(cue in query for cue in CREATION_CUES) and pattern.category.lower() == "creational":
        fit += 0.2

    if len(request.query.split()) <= 3 and pattern.complexity.lower() == "low":
        fit += 0.1

    return clamp(fit)


def problem_fit(request: SearchRequest, category: str) -> str:
    return (
        f'This pattern addresses your requirement for "{request.query}" by providing '
        f"a proven solution for {category.lower()} scenarios."
    )


class RecommendationBuilder:
    """Turns matches into recommendations with justification, guidance and alternatives."""

    def __init__(
        self,
        store: PatternStore,
        *,
        max_alternatives: int = 3,
        max_examples: int = 3,
        placeholder_similarity: float = 0.7,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._store = store
        self._max_alternatives = max_alternatives
        self._max_examples = max_examples
        self._placeholder_similarity = placeholder_similarity
        self._telemetry = telemetry or Telemetry.for_component("search.builder")

    async def get_detailed_pattern(self, pattern_id: str) -> DetailedPattern | None:
        return await self._store.get_pattern(pattern_id)

    async def build(
        self, matches: Sequence[MatchRecord], request: SearchRequest
    ) -> list[Recommendation]:
        started = time.perf_counter()
        details = await self._store.get_patterns(m.pattern.id for m in matches)

        present = [m for m in matches if m.pattern.id in details]
        for missing in (m for m in matches if m.pattern.id not in details):
            self._telemetry.logger.debug("Pattern %s not found in store; skipping", missing.pattern.id)

        recommendations = await asyncio.gather(
            *(
                self._build_one(match, details[match.pattern.id], request, rank, matches)
                for rank, match in enumerate(present, start=1)
            )
        )

        self._telemetry.completed(
            "builder.build",
            request.query,
            started,
            matches=len(matches),
            recommendations=len(recommendations),
        )
        return list(recommendations)

    async def _build_one(
        self,
        match: MatchRecord,
        pattern: DetailedPattern,
        request: SearchRequest,
        rank: int,
        all_matches: Sequence[MatchRecord],
    ) -> Recommendation:
        implementations, alternatives = await asyncio.gather(
            self._store.get_implementations(
                pattern.id, request.programming_language, self._max_examples
            ),
            self._find_alternatives(pattern.id, all_matches),
        )

        reasons = match.reasons or [DEFAULT_PRIMARY_REASON]
        metadata = match.metadata
        raw_keyword = metadata.keyword_score if metadata else None

        return Recommendation(
            id=recommendation_id(request.id, pattern.id),
            request_id=request.id,
            pattern=pattern.summary(),
            confidence=match.confidence,
            rank=rank,
            justification=Justification(
                primary_reason=reasons[0],
                supporting_reasons=list(reasons[1:]),
                problem_fit=problem_fit(request, pattern.category),
                benefits=list(pattern.benefits),
                drawbacks=list(pattern.drawbacks),
            ),
            implementation=self._guidance(pattern, implementations),
            alternatives=alternatives,
            contextual_fit=contextual_fit(pattern, request),
            semantic_score=metadata.semantic_score if metadata else None,
            keyword_score=normalize_keyword_score(raw_keyword) if raw_keyword else None,
        )

    def _guidance(
        self, pattern: DetailedPattern, implementations: Sequence[PatternImplementation]
    ) -> ImplementationGuidance:
        examples = [
            CodeExample(
                language=impl.language,
                title=f"{pattern.name} in {impl.language}",
                code=impl.code,
                explanation=impl.explanation,
            )
            for impl in implementations[: self._max_examples]
        ]
        return ImplementationGuidance(
            steps=list(IMPLEMENTATION_STEPS),
            examples=examples,
            testing=TestingGuidance(
                unit_tests=list(UNIT_TEST_HINTS),
                integration_tests=list(INTEGRATION_TEST_HINTS),
                scenarios=list(TEST_SCENARIOS),
            ),
        )

    async def _find_alternatives(
        self, pattern_id: str, all_matches: Sequence[MatchRecord]
    ) -> list[AlternativePattern]:
        if self._max_alternatives <= 0:
            return []

        relationships = await self._store.get_relationships(pattern_id, ALTERNATIVE_TYPES)
        by_id = {m.pattern.id: m for m in all_matches}
        alternatives: list[AlternativePattern] = []

        for rel in relationships[: self._max_alternatives]:
            matched = by_id.get(rel.target_id)
            if matched is not None:
                alternatives.append(
                    AlternativePattern(
                        id=rel.target_id,
                        name=matched.pattern.name,
                        category=matched.pattern.category,
                        reason=rel.description,
                        score=matched.confidence,
                    )
                )
                continue

            target = await self._store.get_pattern(rel.target_id)
            alternatives.append(
                AlternativePattern(
                    id=rel.target_id,
                    name=target.name if target else UNKNOWN_PATTERN,
                    category=target.category if target else UNKNOWN_CATEGORY,
                    reason=rel.description,
                    score=self._placeholder_similarity,
                )
            )
        return alternatives


__all__ = [
    "IMPLEMENTATION_STEPS",
    "RecommendationBuilder",
    "contextual_fit",
    "problem_fit",
    "recommendation_id",
]
