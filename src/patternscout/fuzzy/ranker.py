"""Fuzzy refinement of recommendation confidences."""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from patternscout.core.telemetry import Telemetry

from .defuzzification import DefuzzResult, FuzzyDefuzzifier
from .inference import FuzzyInferenceEngine, InferenceOutput
from .membership import FuzzyInput

if TYPE_CHECKING:
    from patternscout.search.models import Recommendation

KEYWORD_MARKERS = ("contains", "matches", "keyword")
BASE_KEYWORD_STRENGTH = 0.3
KEYWORD_STRENGTH_STEP = 0.2


def keyword_strength(reasons: Iterable[str]) -> float:
    """Crisp keyword strength from how many reasons cite a lexical hit."""
    hits = sum(1 for reason in reasons if any(m in reason.lower() for m in KEYWORD_MARKERS))
    return min(1.0, BASE_KEYWORD_STRENGTH + KEYWORD_STRENGTH_STEP * hits)


def fuzzy_input_for(recommendation: Recommendation) -> FuzzyInput:
    return FuzzyInput(
        semantic_similarity=recommendation.confidence,
        keyword_strength=keyword_strength(recommendation.justification.all_reasons),
        complexity=recommendation.pattern.complexity,
        contextual_fit=recommendation.contextual_fit,
        pattern_id=recommendation.pattern.id,
    )


class FuzzyRanker:
    """Membership, inference and defuzzification applied per recommendation.

    A failure for one recommendation is logged and that recommendation keeps
    its prior confidence; the rest of the batch is still refined.
    """

    def __init__(
        self,
        engine: FuzzyInferenceEngine | None = None,
        defuzzifier: FuzzyDefuzzifier | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._engine = engine or FuzzyInferenceEngine()
        self._defuzzifier = defuzzifier or FuzzyDefuzzifier("centroid")
        self._telemetry = telemetry or Telemetry.for_component("fuzzy")

    def evaluate(self, recommendation: Recommendation) -> tuple[InferenceOutput, DefuzzResult]:
        output = self._engine.evaluate(fuzzy_input_for(recommendation))
        return output, self._defuzzifier.defuzzify(output.score)

    def refine(self, recommendations: Sequence[Recommendation], query: str = "") -> int:
        """Mutate confidences in place; return how many were refined."""
        started = time.perf_counter()
        refined = 0

        with self._telemetry.span("fuzzy.refine", batch_size=len(recommendations)):
            for recommendation in recommendations:
                item_started = time.perf_counter()
                try:
                    output, result = self.evaluate(recommendation)
                except Exception as exc:
                    self._telemetry.failure(
                        f"fuzzy.refine[{recommendation.pattern.id}]", query, item_started, exc
                    )
                    continue

                recommendation.confidence = max(0.0, min(1.0, result.value))
                recommendation.justification.fuzzy_reasoning = output.reasoning
                recommendation.justification.fuzzy_confidence = result.confidence
                refined += 1

        self._telemetry.completed(
            "fuzzy.refine", query, started, refined=refined, total=len(recommendations)
        )
        return refined


__all__ = ["FuzzyRanker", "fuzzy_input_for", "keyword_strength"]
