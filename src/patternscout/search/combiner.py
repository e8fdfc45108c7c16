"""Fusion of per-strategy match lists into one hybrid list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from patternscout.core.telemetry import Telemetry

from .keyword import RAW_SCORE_SCALE, normalize_keyword_score
from .models import AlphaResult, MatchMetadata, MatchRecord, clamp

DEFAULT_SEMANTIC_WEIGHT = 0.7
DEFAULT_KEYWORD_WEIGHT = 0.3


def fuse_scores(
    semantic: float, keyword: float, semantic_weight: float, keyword_weight: float
) -> float:
    """Weighted average of the present sides; a zero score means "absent".

    The weights are renormalized by their own sum so that a missing side
    never dilutes the one that is present.
    """
    if semantic > 0 and keyword > 0:
        total = semantic_weight + keyword_weight
        if total <= 0:
            return clamp((semantic + keyword) / 2)
        return clamp((semantic_weight * semantic + keyword_weight * keyword) / total)
    if semantic > 0:
        return clamp(semantic)
    if keyword > 0:
        return clamp(keyword)
    return 0.0


class HybridCombiner:
    """Groups matches by pattern id and fuses their scores."""

    def __init__(
        self,
        *,
        default_semantic_weight: float = DEFAULT_SEMANTIC_WEIGHT,
        default_keyword_weight: float = DEFAULT_KEYWORD_WEIGHT,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._default_semantic = default_semantic_weight
        self._default_keyword = default_keyword_weight
        self._telemetry = telemetry or Telemetry.for_component("search.combiner")

    def combine(
        self, records: Iterable[MatchRecord], alpha: AlphaResult | None = None
    ) -> list[MatchRecord]:
        records = list(records)
        semantic_weight = alpha.semantic_weight if alpha else self._default_semantic
        keyword_weight = alpha.keyword_weight if alpha else self._default_keyword

        groups: dict[str, list[MatchRecord]] = {}
        for record in records:
            groups.setdefault(record.pattern.id, []).append(record)

        combined: list[MatchRecord] = []
        for group in groups.values():
            semantic_match = next((m for m in group if m.origin == "semantic"), None)
            keyword_match = next((m for m in group if m.origin == "keyword"), None)

            semantic_score = _semantic_score(semantic_match)
            raw_keyword = _raw_keyword_score(keyword_match)
            keyword_score = normalize_keyword_score(raw_keyword)

            final = fuse_scores(semantic_score, keyword_score, semantic_weight, keyword_weight)
            reasons = [
                *(semantic_match.reasons if semantic_match else []),
                *(keyword_match.reasons if keyword_match else []),
            ]
            combined.append(
                MatchRecord(
                    pattern=group[0].pattern,
                    confidence=final,
                    origin="hybrid",
                    reasons=reasons,
                    metadata=MatchMetadata(
                        final_score=final,
                        semantic_score=semantic_score,
                        keyword_score=raw_keyword,
                    ),
                )
            )

        combined.sort(key=lambda m: (-m.confidence, m.pattern.name))
        self._telemetry.logger.debug(
            "Combined %d matches into %d (semantic=%.3f keyword=%.3f)",
            len(records),
            len(combined),
            semantic_weight,
            keyword_weight,
        )
        return combined

    def apply_weight(self, records: Iterable[MatchRecord], weight: float) -> list[MatchRecord]:
        """Scale confidences by a strategy weight (used when fusion is disabled)."""
        weighted: list[MatchRecord] = []
        for record in records:
            score = clamp(record.confidence * weight)
            metadata = record.metadata or MatchMetadata(final_score=score)
            weighted.append(
                replace(record, confidence=score, metadata=replace(metadata, final_score=score))
            )
        return weighted

    def best_per_pattern(self, records: Iterable[MatchRecord]) -> list[MatchRecord]:
        """Keep only the highest-confidence record for each pattern id."""
        best: dict[str, MatchRecord] = {}
        for record in records:
            current = best.get(record.pattern.id)
            if current is None or record.confidence > current.confidence:
                best[record.pattern.id] = record
        return sorted(best.values(), key=lambda m: (-m.confidence, m.pattern.name))


def _semantic_score(match: MatchRecord | None) -> float:
    if match is None:
        return 0.0
    score = match.metadata.semantic_score if match.metadata else None
    return score if score is not None else match.confidence


def _raw_keyword_score(match: MatchRecord | None) -> float:
    if match is None:
        return 0.0
    raw = match.metadata.keyword_score if match.metadata else None
    return raw if raw is not None else match.confidence * RAW_SCORE_SCALE


__all__ = ["HybridCombiner", "fuse_scores"]
