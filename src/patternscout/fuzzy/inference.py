"""Rule-based fuzzy inference.

Rules are plain data: a tuple of (dimension, label) antecedents and one output
bucket. A single generic engine evaluates any rule table:
    - antecedent strength = min of the named membership degrees
    - bucket degree = max strength over the rules targeting it
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Final, Literal

from .membership import LABELS, Dimension, FuzzyInput, FuzzyMembership, fuzzify

OutputBucket = Literal["low", "medium", "high", "very_high"]
BUCKETS: Final[tuple[OutputBucket, ...]] = ("low", "medium", "high", "very_high")


@dataclass(frozen=True)
class Rule:
    name: str
    antecedents: tuple[tuple[Dimension, str], ...]
    consequent: OutputBucket
    description: str = ""

    def __post_init__(self) -> None:
        dimensions = {dim for dim, _ in self.antecedents}
        if len(dimensions) < 2:
            raise ValueError(f"Rule {self.name!r} must span at least two dimensions")
        for dim, label in self.antecedents:
            if label not in LABELS.get(dim, ()):
                raise ValueError(f"Rule {self.name!r} references unknown label {dim}.{label}")
        if self.consequent not in BUCKETS:
            raise ValueError(f"Rule {self.name!r} has unknown consequent {self.consequent!r}")

    def strength(self, membership: FuzzyMembership) -> float:
        return min(membership.degree(dim, label) for dim, label in self.antecedents)


DEFAULT_RULES: Final[tuple[Rule, ...]] = (
    Rule("semantic_keyword_agree", (("semantic", "high"), ("keyword", "strong")), "very_high",
         "Strong semantic and keyword alignment"),
    Rule("semantic_context_agree", (("semantic", "high"), ("fit", "excellent")), "very_high",
         "Excellent semantic-contextual fit"),
    Rule("context_keyword_agree", (("fit", "excellent"), ("keyword", "strong")), "very_high",
         "Excellent context backed by strong keywords"),
    Rule("semantic_led_moderate", (("semantic", "high"), ("keyword", "moderate")), "high",
         "Good semantic-keyword alignment"),
    Rule("semantic_led_weak", (("semantic", "high"), ("keyword", "weak")), "high",
         "Semantically relevant despite few keyword hits"),
    Rule("keyword_led", (("semantic", "medium"), ("keyword", "strong")), "high",
         "Strong keyword evidence with partial semantic support"),
    Rule("balanced_evidence", (("semantic", "medium"), ("keyword", "moderate"), ("fit", "good")),
         "high", "Balanced relevance factors"),
    Rule("complex_but_relevant", (("complexity", "complex"), ("semantic", "high")), "high",
         "Complex but semantically relevant pattern"),
    Rule("partial_semantic", (("semantic", "medium"), ("keyword", "weak")), "medium",
         "Partial semantic match with weak keywords"),
    Rule("partial_context", (("semantic", "medium"), ("fit", "good")), "medium",
         "Partial semantic match in a reasonable context"),
    Rule("keyword_only", (("semantic", "low"), ("keyword", "strong")), "medium",
         "Keyword match without semantic support"),
    Rule("weak_semantic_moderate", (("semantic", "low"), ("keyword", "moderate")), "low",
         "Low semantic relevance with moderate keywords"),
    Rule("weak_everywhere", (("semantic", "low"), ("keyword", "weak")), "low",
         "Little evidence of relevance"),
    Rule("poor_fit_semantic", (("fit", "poor"), ("semantic", "low")), "low",
         "Contextual fit concerns"),
    Rule("poor_fit_keyword", (("fit", "poor"), ("keyword", "weak")), "low",
         "Contextual fit concerns with weak keywords"),
)


@dataclass
class FuzzyScore:
    """Degrees of the output buckets."""

    low: float = 0.0
    medium: float = 0.0
    high: float = 0.0
    very_high: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {bucket: getattr(self, bucket) for bucket in BUCKETS}

    def ordered(self) -> list[float]:
        return [getattr(self, bucket) for bucket in BUCKETS]

    def dominant(self) -> OutputBucket:
        """Bucket with the highest degree; ties go to the lower bucket."""
        best_index = 0
        degrees = self.ordered()
        for index, degree in enumerate(degrees):
            if degree > degrees[best_index]:
                best_index = index
        return BUCKETS[best_index]

    @classmethod
    def from_mapping(cls, degrees: dict[str, float]) -> FuzzyScore:
        return cls(**{bucket: float(degrees.get(bucket, 0.0)) for bucket in BUCKETS})


@dataclass(frozen=True)
class RuleFiring:
    rule: Rule
    strength: float

    @property
    def reasoning(self) -> str:
        return f"{self.rule.description or self.rule.name} ({self.strength * 100:.1f}% strength)"


@dataclass
class InferenceOutput:
    score: FuzzyScore
    membership: FuzzyMembership
    firings: list[RuleFiring] = field(default_factory=list)
    confidence: float = 0.0

    @property
    def reasoning(self) -> list[str]:
        if not self.firings:
            return ["No fuzzy rule fired; relevance left undetermined"]
        return [firing.reasoning for firing in self.firings]


def decisiveness(score: FuzzyScore) -> float:
    """Dominant bucket's margin over the runner-up, in [0, 1]."""
    ranked = sorted(score.ordered(), reverse=True)
    margin = ranked[0] - ranked[1]
    return max(0.0, min(1.0, margin))


class FuzzyInferenceEngine:
    """Evaluates a rule table with min (AND) and max (aggregation)."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def infer(self, membership: FuzzyMembership) -> InferenceOutput:
        degrees = dict.fromkeys(BUCKETS, 0.0)
        firings: list[RuleFiring] = []

        for rule in self._rules:
            strength = rule.strength(membership)
            if strength <= 0:
                continue
            firings.append(RuleFiring(rule=rule, strength=strength))
            degrees[rule.consequent] = max(degrees[rule.consequent], strength)

        score = FuzzyScore.from_mapping(degrees)
        return InferenceOutput(
            score=score,
            membership=membership,
            firings=firings,
            confidence=decisiveness(score),
        )

    def evaluate(self, inputs: FuzzyInput) -> InferenceOutput:
        return self.infer(fuzzify(inputs))


@dataclass
class RuleStatistics:
    total_evaluations: int
    most_fired_rules: list[tuple[str, int]]
    average_confidence: float
    distribution: dict[str, int]


def rule_statistics(outputs: Iterable[InferenceOutput], top: int = 5) -> RuleStatistics:
    """Aggregate firing counts, decisiveness and dominant-bucket distribution."""
    outputs = list(outputs)
    fired: Counter[str] = Counter()
    distribution = dict.fromkeys(BUCKETS, 0)
    total_confidence = 0.0

    for output in outputs:
        fired.update(firing.rule.name for firing in output.firings)
        distribution[output.score.dominant()] += 1
        total_confidence += output.confidence

    return RuleStatistics(
        total_evaluations=len(outputs),
        most_fired_rules=fired.most_common(top),
        average_confidence=total_confidence / len(outputs) if outputs else 0.0,
        distribution=distribution,
    )


__all__ = [
    "BUCKETS",
    "DEFAULT_RULES",
    "FuzzyInferenceEngine",
    "FuzzyScore",
    "InferenceOutput",
    "OutputBucket",
    "Rule",
    "RuleFiring",
    "RuleStatistics",
    "decisiveness",
    "rule_statistics",
]
