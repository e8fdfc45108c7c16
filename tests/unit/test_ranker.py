"""Tests for fuzzy/ranker.py - in-place confidence refinement."""

from __future__ import annotations

import logging
import math

import pytest

from conftest import summary
from patternscout.fuzzy.defuzzification import FuzzyDefuzzifier
from patternscout.fuzzy.ranker import FuzzyRanker, fuzzy_input_for, keyword_strength
from patternscout.search.models import (
    ImplementationGuidance,
    Justification,
    Recommendation,
)


def _recommendation(
    pattern_id: str,
    confidence: float,
    reasons: list[str],
    *,
    fit: float = 0.5,
) -> Recommendation:
    return Recommendation(
        id=f"rec-{pattern_id}",
        request_id="req",
        pattern=summary(pattern_id),
        confidence=confidence,
        rank=1,
        justification=Justification(reasons[0], reasons[1:]),
        implementation=ImplementationGuidance(steps=[]),
        contextual_fit=fit,
    )


class TestKeywordStrength:
    def test_base_value(self) -> None:
        assert keyword_strength(["Semantic similarity: 80.0%"]) == pytest.approx(0.3)

    def test_counts_lexical_reasons(self) -> None:
        reasons = [
            'Pattern name contains "factory"',
            'Pattern category matches "creational"',
            'Pattern description mentions "object"',
        ]
        assert keyword_strength(reasons) == pytest.approx(0.7)

    def test_capped_at_one(self) -> None:
        assert keyword_strength(["keyword"] * 10) == 1.0


class TestFuzzyInput:
    def test_built_from_recommendation(self) -> None:
        rec = _recommendation("observer", 0.7, ["Semantic similarity: 70.0%"], fit=0.8)
        inputs = fuzzy_input_for(rec)
        assert inputs.semantic_similarity == 0.7
        assert inputs.keyword_strength == pytest.approx(0.3)
        assert inputs.contextual_fit == 0.8
        assert inputs.complexity == "Medium"
        assert inputs.pattern_id == "observer"


class TestFuzzyRanker:
    def test_refines_in_place(self) -> None:
        rec = _recommendation("singleton", 0.85, ["Semantic similarity: 85.0%"])
        refined = FuzzyRanker().refine([rec], "one shared instance")

        assert refined == 1
        assert 0.0 <= rec.confidence <= 1.0
        assert rec.confidence != 0.85
        assert rec.justification.fuzzy_reasoning
        assert rec.justification.fuzzy_confidence is not None

    def test_max_membership_method(self) -> None:
        rec = _recommendation("observer", 0.0, ["nothing"], fit=0.0)
        FuzzyRanker(defuzzifier=FuzzyDefuzzifier("max_membership")).refine([rec])
        assert rec.confidence == pytest.approx(0.15)

    def test_failure_keeps_prior_confidence(self, caplog: pytest.LogCaptureFixture) -> None:
        broken = _recommendation("broken", 0.42, ["x"], fit=math.nan)
        healthy = _recommendation("healthy", 0.9, ["Semantic similarity: 90.0%"])

        with caplog.at_level(logging.WARNING, logger="patternscout"):
            refined = FuzzyRanker().refine([broken, healthy], "query")

        assert refined == 1
        assert broken.confidence == 0.42
        assert broken.justification.fuzzy_reasoning == []
        assert healthy.justification.fuzzy_reasoning
        assert "fuzzy.refine[broken] failed" in caplog.text

    def test_empty_batch(self) -> None:
        assert FuzzyRanker().refine([]) == 0
