"""Fuzzification: crisp inputs to linguistic membership degrees.

Four dimensions are fuzzified:
    - semantic: low / medium / high
    - keyword: weak / moderate / strong
    - complexity: simple / moderate / complex (categorical, exactly one is 1)
    - fit: poor / good / excellent

Degrees within a dimension need not sum to 1.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Literal

from patternscout.core.result import RefinementError

Dimension = Literal["semantic", "keyword", "complexity", "fit"]

SEMANTIC_LABELS: Final[tuple[str, ...]] = ("low", "medium", "high")
KEYWORD_LABELS: Final[tuple[str, ...]] = ("weak", "moderate", "strong")
COMPLEXITY_LABELS: Final[tuple[str, ...]] = ("simple", "moderate", "complex")
FIT_LABELS: Final[tuple[str, ...]] = ("poor", "good", "excellent")

LABELS: Final[dict[str, tuple[str, ...]]] = {
    "semantic": SEMANTIC_LABELS,
    "keyword": KEYWORD_LABELS,
    "complexity": COMPLEXITY_LABELS,
    "fit": FIT_LABELS,
}

_SIMPLE_NAMES = frozenset({"low", "simple", "easy", "beginner"})
_COMPLEX_NAMES = frozenset({"high", "complex", "advanced", "hard"})


# -----------------------------------------------------------------------------
# Shape Functions
# -----------------------------------------------------------------------------


def falling(x: float, full_until: float, zero_at: float) -> float:
    """1 up to `full_until`, linear down to 0 at `zero_at`."""
    if x <= full_until:
        return 1.0
    if x >= zero_at:
        return 0.0
    return (zero_at - x) / (zero_at - full_until)


def rising(x: float, zero_until: float, full_at: float) -> float:
    """0 up to `zero_until`, linear up to 1 at `full_at`."""
    if x <= zero_until:
        return 0.0
    if x >= full_at:
        return 1.0
    return (x - zero_until) / (full_at - zero_until)


def triangle(x: float, left: float, peak: float, right: float) -> float:
    if x <= left or x >= right:
        return 0.0
    if x <= peak:
        return (x - left) / (peak - left)
    return (right - x) / (right - peak)


def trapezoid(x: float, a: float, b: float, c: float, d: float) -> float:
    """Rises over [a, b], flat over [b, c], falls over [c, d]."""
    if x <= a or x >= d:
        return 0.0
    if x < b:
        return (x - a) / (b - a)
    if x <= c:
        return 1.0
    return (d - x) / (d - c)


# -----------------------------------------------------------------------------
# Membership
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FuzzyInput:
    """Crisp inputs for one recommendation."""

    semantic_similarity: float
    keyword_strength: float
    complexity: str
    contextual_fit: float
    pattern_id: str = ""


@dataclass(frozen=True)
class FuzzyMembership:
    semantic: Mapping[str, float]
    keyword: Mapping[str, float]
    complexity: Mapping[str, float]
    fit: Mapping[str, float]

    def degree(self, dimension: Dimension, label: str) -> float:
        values: Mapping[str, float] = getattr(self, dimension)
        try:
            return values[label]
        except KeyError as exc:
            raise RefinementError(
                "Unknown linguistic label", context={"dimension": dimension, "label": label}
            ) from exc

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {dim: dict(getattr(self, dim)) for dim in LABELS}


def _crisp(value: float, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise RefinementError("Non-finite fuzzy input", context={"input": name, "value": value})
    return max(0.0, min(1.0, number))


def semantic_membership(x: float) -> dict[str, float]:
    x = _crisp(x, "semantic")
    return {
        "low": falling(x, 0.0, 0.5),
        "medium": triangle(x, 0.2, 0.5, 0.8),
        "high": rising(x, 0.5, 1.0),
    }


def keyword_membership(x: float) -> dict[str, float]:
    x = _crisp(x, "keyword")
    return {
        "weak": falling(x, 0.2, 0.4),
        "moderate": trapezoid(x, 0.2, 0.4, 0.6, 0.8),
        "strong": rising(x, 0.6, 0.8),
    }


def complexity_membership(category: str | None) -> dict[str, float]:
    name = (category or "").strip().lower()
    if name in _SIMPLE_NAMES:
        label = "simple"
    elif name in _COMPLEX_NAMES:
        label = "complex"
    else:
        label = "moderate"
    return {key: 1.0 if key == label else 0.0 for key in COMPLEXITY_LABELS}


def fit_membership(x: float) -> dict[str, float]:
    x = _crisp(x, "fit")
    return {
        "poor": falling(x, 0.2, 0.5),
        "good": trapezoid(x, 0.2, 0.5, 0.8, 1.0),
        "excellent": rising(x, 0.8, 1.0),
    }


def fuzzify(inputs: FuzzyInput) -> FuzzyMembership:
    return FuzzyMembership(
        semantic=semantic_membership(inputs.semantic_similarity),
        keyword=keyword_membership(inputs.keyword_strength),
        complexity=complexity_membership(inputs.complexity),
        fit=fit_membership(inputs.contextual_fit),
    )


def linguistic_levels(membership: FuzzyMembership) -> dict[str, str]:
    """Dominant label per dimension; ties go to the earlier label."""
    levels: dict[str, str] = {}
    for dim, labels in LABELS.items():
        degrees: Mapping[str, float] = getattr(membership, dim)
        best = labels[0]
        for label in labels[1:]:
            if degrees[label] > degrees[best]:
                best = label
        levels[dim] = best
    return levels


__all__ = [
    "COMPLEXITY_LABELS",
    "FIT_LABELS",
    "KEYWORD_LABELS",
    "LABELS",
    "SEMANTIC_LABELS",
    "Dimension",
    "FuzzyInput",
    "FuzzyMembership",
    "complexity_membership",
    "falling",
    "fit_membership",
    "fuzzify",
    "keyword_membership",
    "linguistic_levels",
    "rising",
    "semantic_membership",
    "trapezoid",
    "triangle",
]
