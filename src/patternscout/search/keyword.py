"""Sparse lexical search over the pattern corpus."""

from __future__ import annotations

import re
import time
from collections.abc import Iterable, Sequence

from patternscout.core.result import Err, Ok, Result, StrategyError
from patternscout.core.telemetry import Telemetry

from .models import MatchMetadata, MatchRecord, PatternSummary, SearchRequest
from .protocols import PatternStore

MIN_TOKEN_CHARS = 3
TEXT_HIT = 0.5
NAME_BONUS = 1.0
CATEGORY_BONUS = 0.5
RAW_SCORE_SCALE = 10.0
MAX_KEYWORD_CONFIDENCE = 0.99
DEFAULT_REASON = "Keyword-based pattern match"

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(query: str) -> list[str]:
    """Lowercase, replace punctuation with spaces, keep tokens longer than two chars."""
    cleaned = _NON_WORD_RE.sub(" ", query.lower())
    return [word for word in cleaned.split() if len(word) >= MIN_TOKEN_CHARS]


def normalize_keyword_score(raw: float) -> float:
    """Map a raw lexical score into [0, 0.99]."""
    return max(0.0, min(raw / RAW_SCORE_SCALE, MAX_KEYWORD_CONFIDENCE))


def keyword_score(tokens: Sequence[str], pattern: PatternSummary) -> float:
    score = 0.0
    name = pattern.name.lower()
    category = pattern.category.lower()
    text = f"{pattern.name} {pattern.description} {' '.join(pattern.tags)}".lower()

    for word in tokens:
        if word in text:
            score += TEXT_HIT
        if word in name:
            score += NAME_BONUS
        if word in category:
            score += CATEGORY_BONUS
    return score


def keyword_reasons(tokens: Sequence[str], pattern: PatternSummary) -> list[str]:
    reasons: list[str] = []
    name = pattern.name.lower()
    description = pattern.description.lower()
    category = pattern.category.lower()

    for word in tokens:
        if word in name:
            reasons.append(f'Pattern name contains "{word}"')
        if word in description:
            reasons.append(f'Pattern description mentions "{word}"')
        if word in category:
            reasons.append(f'Pattern category matches "{word}"')
    return reasons or [DEFAULT_REASON]


class KeywordSearchHandler:
    """Scores every candidate pattern by token overlap with the query."""

    def __init__(
        self,
        store: PatternStore,
        *,
        max_results: int = 5,
        fetch_factor: int = 2,
        min_confidence: float = 0.05,
        broad_search_threshold: float = 0.01,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._store = store
        self._max_results = max_results
        self._fetch_factor = fetch_factor
        self._min_confidence = min_confidence
        self._broad_threshold = broad_search_threshold
        self._telemetry = telemetry or Telemetry.for_component("search.keyword")

    @property
    def max_results(self) -> int:
        return self._max_results

    async def search(self, request: SearchRequest) -> list[MatchRecord]:
        return (await self.search_safe(request)).unwrap_or([])

    async def search_safe(self, request: SearchRequest) -> Result[list[MatchRecord], StrategyError]:
        return await self._run(
            "keyword.search",
            request,
            categories=request.categories,
            threshold=self._min_confidence,
            limit=None,
        )

    async def broad_search(self, request: SearchRequest) -> list[MatchRecord]:
        return (await self.broad_search_safe(request)).unwrap_or([])

    async def broad_search_safe(
        self, request: SearchRequest
    ) -> Result[list[MatchRecord], StrategyError]:
        return await self._run(
            "keyword.broad_search",
            request,
            categories=None,
            threshold=self._broad_threshold,
            limit=request.fetch_limit(self._max_results, self._fetch_factor),
        )

    async def _run(
        self,
        operation: str,
        request: SearchRequest,
        *,
        categories: Iterable[str] | None,
        threshold: float,
        limit: int | None,
    ) -> Result[list[MatchRecord], StrategyError]:
        started = time.perf_counter()
        with self._telemetry.span(operation, query_length=len(request.query)):
            try:
                tokens = tokenize(request.query)
                candidates = await self._store.list_patterns(categories)
                matches = self._score(tokens, candidates, threshold)
            except Exception as exc:
                self._telemetry.failure(operation, request.query, started, exc)
                return Err(
                    StrategyError(
                        "Keyword search failed",
                        context={"operation": operation, "error": str(exc)},
                    )
                )

        matches.sort(key=lambda m: (-m.confidence, m.pattern.name))
        if limit is not None:
            matches = matches[:limit]
        self._telemetry.completed(operation, request.query, started, results=len(matches))
        return Ok(matches)

    def _score(
        self,
        tokens: Sequence[str],
        candidates: Iterable[PatternSummary],
        threshold: float,
    ) -> list[MatchRecord]:
        matches: list[MatchRecord] = []
        if not tokens:
            return matches

        for pattern in candidates:
            raw = keyword_score(tokens, pattern)
            confidence = normalize_keyword_score(raw)
            if raw <= 0 or confidence < threshold:
                continue
            matches.append(
                MatchRecord(
                    pattern=pattern,
                    confidence=confidence,
                    origin="keyword",
                    reasons=keyword_reasons(tokens, pattern),
                    metadata=MatchMetadata(final_score=confidence, keyword_score=raw),
                )
            )
        return matches


__all__ = [
    "KeywordSearchHandler",
    "keyword_reasons",
    "keyword_score",
    "normalize_keyword_score",
    "tokenize",
]
