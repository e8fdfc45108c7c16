"""Defuzzification: output bucket degrees to one crisp relevance value."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Final, Literal

import numpy as np

from .inference import BUCKETS, FuzzyScore

Method = Literal["centroid", "max_membership"]

REPRESENTATIVES: Final[dict[str, float]] = {
    "low": 0.15,
    "medium": 0.5,
    "high": 0.8,
    "very_high": 0.95,
}
NEUTRAL_VALUE: Final[float] = 0.5
MAX_CONFIDENCE: Final[float] = 0.95


@dataclass(frozen=True)
class DefuzzResult:
    value: float
    confidence: float
    method: Method


def _as_score(score: FuzzyScore | Mapping[str, float]) -> FuzzyScore:
    return score if isinstance(score, FuzzyScore) else FuzzyScore.from_mapping(dict(score))


def centroid(score: FuzzyScore | Mapping[str, float]) -> DefuzzResult:
    """Degree-weighted mean of the bucket representatives."""
    degrees = np.array(_as_score(score).ordered(), dtype=np.float64)
    degrees = np.clip(degrees, 0.0, 1.0)
    total = float(degrees.sum())
    if total <= 0:
        return DefuzzResult(value=NEUTRAL_VALUE, confidence=0.0, method="centroid")

    representatives = np.array([REPRESENTATIVES[b] for b in BUCKETS], dtype=np.float64)
    value = float(degrees @ representatives) / total
    confidence = min(MAX_CONFIDENCE, 0.1 + 0.9 * float(degrees.max()))
    return DefuzzResult(value=max(0.0, min(1.0, value)), confidence=confidence, method="centroid")


def max_membership(score: FuzzyScore | Mapping[str, float]) -> DefuzzResult:
    """Representative of the highest-degree bucket; ties go to the lower bucket."""
    fuzzy = _as_score(score)
    degrees = fuzzy.ordered()
    if max(degrees) <= 0:
        return DefuzzResult(value=NEUTRAL_VALUE, confidence=0.0, method="max_membership")
    bucket = fuzzy.dominant()
    return DefuzzResult(
        value=REPRESENTATIVES[bucket],
        confidence=min(MAX_CONFIDENCE, getattr(fuzzy, bucket)),
        method="max_membership",
    )


class FuzzyDefuzzifier:
    """Selects a defuzzification method. Centroid is the production method."""

    def __init__(self, method: Method = "centroid") -> None:
        self.method: Method = method

    def defuzzify(self, score: FuzzyScore | Mapping[str, float]) -> DefuzzResult:
        match self.method:
            case "centroid":
                return centroid(score)
            case "max_membership":
                return max_membership(score)
        raise ValueError(f"Unknown defuzzification method: {self.method}")


def defuzzify_batch(
    scores: Iterable[FuzzyScore | Mapping[str, float]], method: Method = "centroid"
) -> list[DefuzzResult]:
    defuzzifier = FuzzyDefuzzifier(method)
    return [defuzzifier.defuzzify(score) for score in scores]


def defuzzification_statistics(results: Iterable[DefuzzResult]) -> dict[str, float]:
    """Summary of a batch: mean, spread and bounds of the crisp values."""
    items = list(results)
    if not items:
        return {
            "count": 0.0,
            "mean": 0.0,
            "std": 0.0,
            "min": 0.0,
            "max": 0.0,
            "mean_confidence": 0.0,
        }
    values = np.array([item.value for item in items], dtype=np.float64)
    confidences = np.array([item.confidence for item in items], dtype=np.float64)
    return {
        "count": float(len(items)),
        "mean": float(values.mean()),
        "std": float(values.std()),
        "min": float(values.min()),
        "max": float(values.max()),
        "mean_confidence": float(confidences.mean()),
    }


__all__ = [
    "REPRESENTATIVES",
    "DefuzzResult",
    "FuzzyDefuzzifier",
    "Method",
    "centroid",
    "defuzzification_statistics",
    "defuzzify_batch",
    "max_membership",
]
