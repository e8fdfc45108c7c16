"""Tests for fuzzy/ - membership, inference and defuzzification."""

from __future__ import annotations

import math

import pytest

from patternscout.core.result import RefinementError
from patternscout.fuzzy.defuzzification import (
    FuzzyDefuzzifier,
    centroid,
    defuzzification_statistics,
    defuzzify_batch,
    max_membership,
)
from patternscout.fuzzy.inference import (
    DEFAULT_RULES,
    FuzzyInferenceEngine,
    FuzzyScore,
    Rule,
    rule_statistics,
)
from patternscout.fuzzy.membership import (
    FuzzyInput,
    complexity_membership,
    fit_membership,
    fuzzify,
    keyword_membership,
    linguistic_levels,
    semantic_membership,
    trapezoid,
    triangle,
)


class TestShapes:
    def test_triangle(self) -> None:
        assert triangle(0.5, 0.2, 0.5, 0.8) == 1.0
        assert triangle(0.35, 0.2, 0.5, 0.8) == pytest.approx(0.5)
        assert triangle(0.9, 0.2, 0.5, 0.8) == 0.0

    def test_trapezoid(self) -> None:
        assert trapezoid(0.5, 0.2, 0.4, 0.6, 0.8) == 1.0
        assert trapezoid(0.3, 0.2, 0.4, 0.6, 0.8) == pytest.approx(0.5)
        assert trapezoid(0.1, 0.2, 0.4, 0.6, 0.8) == 0.0


class TestMembership:
    def test_semantic_levels(self) -> None:
        assert semantic_membership(0.0) == {"low": 1.0, "medium": 0.0, "high": 0.0}
        assert semantic_membership(1.0)["high"] == 1.0
        mid = semantic_membership(0.65)
        assert mid["medium"] == pytest.approx(0.5)
        assert mid["high"] == pytest.approx(0.3)
        assert mid["low"] == 0.0

    def test_keyword_levels(self) -> None:
        assert keyword_membership(0.1)["weak"] == 1.0
        assert keyword_membership(0.5)["moderate"] == 1.0
        assert keyword_membership(0.9)["strong"] == 1.0

    def test_fit_levels(self) -> None:
        assert fit_membership(0.1)["poor"] == 1.0
        assert fit_membership(0.6)["good"] == 1.0
        assert fit_membership(1.0)["excellent"] == 1.0

    def test_complexity_categorical(self) -> None:
        assert complexity_membership("Low") == {"simple": 1.0, "moderate": 0.0, "complex": 0.0}
        assert complexity_membership("HIGH")["complex"] == 1.0
        assert complexity_membership("Medium")["moderate"] == 1.0
        assert complexity_membership(None)["moderate"] == 1.0

    def test_out_of_range_clamped(self) -> None:
        assert semantic_membership(1.7) == semantic_membership(1.0)
        assert semantic_membership(-3.0) == semantic_membership(0.0)

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(RefinementError):
            semantic_membership(math.nan)

    def test_unknown_label(self) -> None:
        membership = fuzzify(FuzzyInput(0.5, 0.5, "Medium", 0.5))
        with pytest.raises(RefinementError):
            membership.degree("semantic", "enormous")

    def test_linguistic_levels(self) -> None:
        membership = fuzzify(FuzzyInput(0.9, 0.1, "High", 0.6))
        assert linguistic_levels(membership) == {
            "semantic": "high",
            "keyword": "weak",
            "complexity": "complex",
            "fit": "good",
        }


class TestRules:
    def test_default_table_shape(self) -> None:
        assert len(DEFAULT_RULES) == 15
        assert len({rule.name for rule in DEFAULT_RULES}) == 15

    def test_single_dimension_rejected(self) -> None:
        with pytest.raises(ValueError, match="two dimensions"):
            Rule("bad", (("semantic", "high"), ("semantic", "low")), "high")

    def test_unknown_label_rejected(self) -> None:
        with pytest.raises(ValueError, match="unknown label"):
            Rule("bad", (("semantic", "huge"), ("keyword", "weak")), "high")

    def test_unknown_consequent_rejected(self) -> None:
        with pytest.raises(ValueError, match="unknown consequent"):
            Rule("bad", (("semantic", "high"), ("keyword", "weak")), "extreme")  # type: ignore[arg-type]


class TestInference:
    def test_min_and_max(self) -> None:
        engine = FuzzyInferenceEngine()
        output = engine.evaluate(FuzzyInput(0.65, 0.9, "Medium", 0.6))

        # semantic_led_weak never fires: keyword weak is 0 at 0.9.
        fired = {f.rule.name: f.strength for f in output.firings}
        assert "semantic_led_weak" not in fired
        assert fired["semantic_keyword_agree"] == pytest.approx(0.3)
        assert fired["keyword_led"] == pytest.approx(0.5)
        assert output.score.very_high == pytest.approx(0.3)
        assert output.score.high == pytest.approx(0.5)
        assert output.score.medium == pytest.approx(0.5)

    def test_reasoning_strings(self) -> None:
        output = FuzzyInferenceEngine().evaluate(FuzzyInput(1.0, 1.0, "Low", 1.0))
        assert "Strong semantic and keyword alignment (100.0% strength)" in output.reasoning

    def test_nothing_fired(self) -> None:
        engine = FuzzyInferenceEngine(rules=())
        output = engine.evaluate(FuzzyInput(0.5, 0.5, "Medium", 0.5))
        assert output.score.ordered() == [0.0, 0.0, 0.0, 0.0]
        assert output.reasoning == ["No fuzzy rule fired; relevance left undetermined"]

    def test_dominant_ties_to_lower_bucket(self) -> None:
        assert FuzzyScore(low=0.4, high=0.4).dominant() == "low"

    def test_rule_statistics(self) -> None:
        engine = FuzzyInferenceEngine()
        outputs = [
            engine.evaluate(FuzzyInput(1.0, 1.0, "Low", 1.0)),
            engine.evaluate(FuzzyInput(0.0, 0.0, "Low", 0.0)),
        ]
        stats = rule_statistics(outputs)
        assert stats.total_evaluations == 2
        assert stats.distribution["very_high"] == 1
        assert stats.distribution["low"] == 1
        assert len(stats.most_fired_rules) <= 5

    def test_rule_statistics_empty(self) -> None:
        stats = rule_statistics([])
        assert stats.total_evaluations == 0
        assert stats.average_confidence == 0.0


class TestDefuzzification:
    def test_centroid(self) -> None:
        result = centroid({"low": 0.2, "medium": 0.8})
        assert result.value == pytest.approx(0.43)
        assert result.confidence == pytest.approx(0.82)

    def test_centroid_all_zero(self) -> None:
        result = centroid(FuzzyScore())
        assert result.value == 0.5
        assert result.confidence == 0.0

    def test_max_membership(self) -> None:
        result = max_membership({"low": 0.2, "medium": 0.8})
        assert result.value == pytest.approx(0.5)
        assert result.confidence == pytest.approx(0.8)

    def test_defuzzifier_dispatch(self) -> None:
        score = FuzzyScore(very_high=1.0)
        assert FuzzyDefuzzifier("centroid").defuzzify(score).value == pytest.approx(0.95)
        assert FuzzyDefuzzifier("max_membership").defuzzify(score).method == "max_membership"

    def test_batch_and_statistics(self) -> None:
        results = defuzzify_batch([FuzzyScore(low=1.0), FuzzyScore(high=1.0)])
        stats = defuzzification_statistics(results)
        assert stats["count"] == 2.0
        assert stats["mean"] == pytest.approx((0.15 + 0.8) / 2)
        assert stats["min"] == pytest.approx(0.15)
        assert stats["max"] == pytest.approx(0.8)

    def test_statistics_empty(self) -> None:
        assert defuzzification_statistics([])["count"] == 0.0
