"""Fuzzy-logic refinement: membership, inference and defuzzification."""

from __future__ import annotations

from .defuzzification import (
    DefuzzResult,
    FuzzyDefuzzifier,
    centroid,
    defuzzification_statistics,
    defuzzify_batch,
    max_membership,
)
from .inference import (
    DEFAULT_RULES,
    FuzzyInferenceEngine,
    FuzzyScore,
    InferenceOutput,
    Rule,
    rule_statistics,
)
from .membership import FuzzyInput, FuzzyMembership, fuzzify, linguistic_levels
from .ranker import FuzzyRanker, keyword_strength

__all__ = [
    "DEFAULT_RULES",
    "DefuzzResult",
    "FuzzyDefuzzifier",
    "FuzzyInferenceEngine",
    "FuzzyInput",
    "FuzzyMembership",
    "FuzzyRanker",
    "FuzzyScore",
    "InferenceOutput",
    "Rule",
    "centroid",
    "defuzzification_statistics",
    "defuzzify_batch",
    "fuzzify",
    "keyword_strength",
    "linguistic_levels",
    "max_membership",
    "rule_statistics",
]
