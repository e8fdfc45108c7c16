"""Query-adaptive fusion weights.

The AlphaTuner inspects query text alone and decides how much to trust dense
(embedding) matches versus sparse (keyword) matches:
- Long, exploratory questions lean semantic
- Short, implementation-focused queries lean keyword
- Weights always sum to 1 and stay within [0.1, 0.9]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .models import AlphaResult, QueryAnalysis, QueryType, clamp

TECHNICAL_TERMS: Final[tuple[str, ...]] = (
    "pattern",
    "architecture",
    "design",
    "algorithm",
    "data",
    "structure",
    "interface",
    "abstract",
    "factory",
    "singleton",
    "observer",
    "strategy",
    "decorator",
    "adapter",
    "bridge",
    "proxy",
    "facade",
    "flyweight",
    "chain",
    "command",
    "mediator",
    "memento",
    "state",
    "template",
    "visitor",
    "iterator",
)

EXPLORATORY_CUES: Final[tuple[str, ...]] = (
    "best",
    "good",
    "how",
    "what",
    "why",
    "explain",
    "learn",
    "understand",
)

SPECIFICITY_CUES: Final[tuple[str, ...]] = (
    "implement",
    "code",
    "example",
    "use",
    "apply",
    "create",
    "write",
)

EXPLORATORY_STEP: Final[float] = 0.15
SPECIFICITY_STEP: Final[float] = 0.12
CUE_SCORE_CAP: Final[float] = 0.5

MIN_WEIGHT: Final[float] = 0.1
MAX_WEIGHT: Final[float] = 0.9
MAX_CONFIDENCE: Final[float] = 0.9
TECHNICAL_CONFIDENCE_STEP: Final[float] = 0.05

LONG_QUERY_CHARS: Final[int] = 100
SHORT_QUERY_CHARS: Final[int] = 30
LONG_QUERY_SHIFT: Final[float] = 0.1
SHORT_QUERY_SHIFT: Final[float] = 0.15

_CODE_SNIPPET_RE = re.compile(r"`[^`]+`|\{[^{]+\}|\([^(]+\)")


@dataclass(frozen=True)
class _BaseWeights:
    semantic: float
    keyword: float
    query_type: QueryType
    confidence: float


BALANCED: Final[_BaseWeights] = _BaseWeights(0.5, 0.5, "balanced", 0.5)


def analyze_query(query: str) -> QueryAnalysis:
    """Extract the lexical features that drive weight selection."""
    normalized = query.lower().strip()
    words = [word for word in normalized.split() if word]

    technical = sum(1 for word in words if any(term in word for term in TECHNICAL_TERMS))

    exploratory = 0.0
    for cue in EXPLORATORY_CUES:
        if cue in normalized:
            exploratory += EXPLORATORY_STEP
    specificity = 0.0
    for cue in SPECIFICITY_CUES:
        if cue in normalized:
            specificity += SPECIFICITY_STEP

    return QueryAnalysis(
        length=len(query),
        word_count=len(words),
        technical_term_count=technical,
        exploratory_score=min(exploratory, CUE_SCORE_CAP),
        specificity_score=min(specificity, CUE_SCORE_CAP),
        has_code_snippet=bool(_CODE_SNIPPET_RE.search(query)),
        entropy=len(set(query)) / max(len(query), 1),
    )


def _select_base(analysis: QueryAnalysis) -> _BaseWeights:
    """Apply the ordered rule table; first matching rule wins."""
    words = analysis.word_count

    if words <= 3 and analysis.specificity_score >= 0.1:
        return _BaseWeights(0.3, 0.7, "specific", 0.7)
    if words > 5 and analysis.exploratory_score > 0.2:
        return _BaseWeights(0.7, 0.3, "exploratory", 0.75)
    if analysis.technical_term_count > 0 and words > 3:
        return _BaseWeights(0.6, 0.4, "exploratory", 0.65)
    if analysis.has_code_snippet:
        return _BaseWeights(0.4, 0.6, "specific", 0.6)
    if analysis.entropy > 0.6 and words > 3:
        return _BaseWeights(0.65, 0.35, "exploratory", 0.55)
    return BALANCED


def _length_adjust(semantic: float, keyword: float, length: int) -> tuple[float, float]:
    if length > LONG_QUERY_CHARS:
        return semantic + LONG_QUERY_SHIFT, keyword - LONG_QUERY_SHIFT
    if length < SHORT_QUERY_CHARS:
        return semantic - SHORT_QUERY_SHIFT, keyword + SHORT_QUERY_SHIFT
    return semantic, keyword


def _normalize(semantic: float, keyword: float) -> tuple[float, float]:
    """Scale to sum 1, then clamp into [MIN_WEIGHT, MAX_WEIGHT].

    Clamping one side to a bound and deriving the other as its complement
    keeps the pair summing to exactly 1.
    """
    semantic = max(semantic, 0.0)
    keyword = max(keyword, 0.0)
    total = semantic + keyword
    share = 0.5 if total <= 0 else semantic / total
    share = clamp(share, MIN_WEIGHT, MAX_WEIGHT)
    return share, 1.0 - share


class AlphaTuner:
    """Derives fusion weights from query text. Stateless and pure."""

    def analyze(self, query: str) -> QueryAnalysis:
        return analyze_query(query)

    def tune(self, query: str) -> AlphaResult:
        analysis = analyze_query(query)
        base = _select_base(analysis)
        semantic, keyword = _length_adjust(base.semantic, base.keyword, analysis.length)
        semantic, keyword = _normalize(semantic, keyword)
        confidence = min(
            MAX_CONFIDENCE,
            base.confidence + TECHNICAL_CONFIDENCE_STEP * analysis.technical_term_count,
        )
        return AlphaResult(
            semantic_weight=semantic,
            keyword_weight=keyword,
            query_type=base.query_type,
            confidence=confidence,
            analysis=analysis,
        )


def tune(query: str) -> AlphaResult:
    """Module-level convenience wrapper around AlphaTuner.tune."""
    return AlphaTuner().tune(query)


__all__ = [
    "EXPLORATORY_CUES",
    "SPECIFICITY_CUES",
    "TECHNICAL_TERMS",
    "AlphaTuner",
    "analyze_query",
    "tune",
]
