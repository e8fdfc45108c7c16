"""Search data models.

This module contains the dataclasses that flow through the search pipeline:
- SearchRequest: validated inbound query (pydantic, immutable)
- QueryAnalysis / AlphaResult: lexical features and fusion weights
- MatchRecord: one pattern's score from one strategy
- Recommendation and its nested justification/guidance records
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

QueryType = Literal["exploratory", "specific", "balanced"]
MatchOrigin = Literal["semantic", "keyword", "hybrid"]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# -----------------------------------------------------------------------------
# Request
# -----------------------------------------------------------------------------


class SearchRequest(BaseModel):
    """One inbound query. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    query: str
    categories: frozenset[str] | None = None
    max_results: int | None = Field(default=None, ge=1)
    programming_language: str | None = None

    @field_validator("categories", mode="before")
    @classmethod
    def normalize_categories(cls, v: object) -> frozenset[str] | None:
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        cleaned = frozenset(str(item).strip() for item in v if str(item).strip())  # type: ignore[union-attr]
        return cleaned or None

    @field_validator("programming_language", mode="before")
    @classmethod
    def normalize_language(cls, v: object) -> str | None:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    def fetch_limit(self, default: int, factor: int = 1) -> int:
        """Candidates a strategy should return: requested (or default) count times `factor`."""
        return max(1, (self.max_results or default) * factor)


# -----------------------------------------------------------------------------
# Pattern Corpus Records
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternSummary:
    """The subset of a pattern carried on match and recommendation records."""

    id: str
    name: str
    category: str
    description: str
    complexity: str = "Medium"
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class DetailedPattern:
    """Full pattern record as held by a PatternStore."""

    id: str
    name: str
    category: str
    description: str
    complexity: str = "Medium"
    tags: tuple[str, ...] = ()
    when_to_use: tuple[str, ...] = ()
    benefits: tuple[str, ...] = ()
    drawbacks: tuple[str, ...] = ()
    use_cases: tuple[str, ...] = ()

    def summary(self) -> PatternSummary:
        return PatternSummary(
            id=self.id,
            name=self.name,
            category=self.category,
            description=self.description,
            complexity=self.complexity,
            tags=self.tags,
        )


@dataclass(frozen=True)
class PatternImplementation:
    id: str
    pattern_id: str
    language: str
    code: str
    explanation: str
    created_at: str = ""


@dataclass(frozen=True)
class PatternRelationship:
    source_id: str
    target_id: str
    type: str  # "alternative", "similar", "complements", ...
    description: str


@dataclass(frozen=True)
class VectorHit:
    id: str
    score: float


# -----------------------------------------------------------------------------
# Query Analysis
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryAnalysis:
    """Lexical features of a query; a pure function of its text."""

    length: int
    word_count: int
    technical_term_count: int
    exploratory_score: float
    specificity_score: float
    has_code_snippet: bool
    entropy: float


@dataclass(frozen=True)
class AlphaResult:
    """Fusion weights for one query. Weights sum to 1 and lie in [0.1, 0.9]."""

    semantic_weight: float
    keyword_weight: float
    query_type: QueryType
    confidence: float
    analysis: QueryAnalysis


# -----------------------------------------------------------------------------
# Matches
# -----------------------------------------------------------------------------


@dataclass
class MatchMetadata:
    final_score: float
    semantic_score: float | None = None
    keyword_score: float | None = None  # raw, un-normalized lexical score


@dataclass
class MatchRecord:
    """One pattern's score from one strategy (or the fused hybrid score)."""

    pattern: PatternSummary
    confidence: float
    origin: MatchOrigin
    reasons: list[str] = field(default_factory=list)
    metadata: MatchMetadata | None = None

    def __post_init__(self) -> None:
        self.confidence = clamp(self.confidence)
        if self.metadata is None:
            self.metadata = MatchMetadata(final_score=self.confidence)


# -----------------------------------------------------------------------------
# Recommendations
# -----------------------------------------------------------------------------


@dataclass
class Justification:
    primary_reason: str
    supporting_reasons: list[str] = field(default_factory=list)
    problem_fit: str = ""
    benefits: list[str] = field(default_factory=list)
    drawbacks: list[str] = field(default_factory=list)
    fuzzy_reasoning: list[str] = field(default_factory=list)
    fuzzy_confidence: float | None = None

    @property
    def all_reasons(self) -> list[str]:
        return [self.primary_reason, *self.supporting_reasons]


@dataclass
class CodeExample:
    language: str
    title: str
    code: str
    explanation: str


@dataclass
class TestingGuidance:
    unit_tests: list[str] = field(default_factory=list)
    integration_tests: list[str] = field(default_factory=list)
    scenarios: list[str] = field(default_factory=list)


@dataclass
class ImplementationGuidance:
    steps: list[str]
    examples: list[CodeExample] = field(default_factory=list)
    testing: TestingGuidance = field(default_factory=TestingGuidance)


@dataclass
class AlternativePattern:
    id: str
    name: str
    category: str
    reason: str
    score: float


@dataclass
class Recommendation:
    """Final user-facing result. Only fuzzy refinement mutates `confidence`."""

    id: str
    request_id: str
    pattern: PatternSummary
    confidence: float
    rank: int
    justification: Justification
    implementation: ImplementationGuidance
    alternatives: list[AlternativePattern] = field(default_factory=list)
    contextual_fit: float = 0.5
    semantic_score: float | None = None
    keyword_score: float | None = None


__all__ = [
    "AlphaResult",
    "AlternativePattern",
    "CodeExample",
    "DetailedPattern",
    "ImplementationGuidance",
    "Justification",
    "MatchMetadata",
    "MatchOrigin",
    "MatchRecord",
    "PatternImplementation",
    "PatternRelationship",
    "PatternSummary",
    "QueryAnalysis",
    "QueryType",
    "Recommendation",
    "SearchRequest",
    "TestingGuidance",
    "VectorHit",
    "clamp",
]
