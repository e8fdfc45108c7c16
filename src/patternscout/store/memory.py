"""In-memory PatternStore implementation."""

from __future__ import annotations

from collections.abc import Iterable

from patternscout.search.models import (
    DetailedPattern,
    PatternImplementation,
    PatternRelationship,
    PatternSummary,
)


def _normalize_filter(values: Iterable[str] | None) -> set[str] | None:
    if values is None:
        return None
    normalized = {value.strip().lower() for value in values if value.strip()}
    return normalized or None


class InMemoryPatternStore:
    """Dict-backed store for patterns, implementations and relationships.

    Category and language filters are case-insensitive. Listing order is by
    pattern name so that results are reproducible.
    """

    def __init__(
        self,
        patterns: Iterable[DetailedPattern] = (),
        implementations: Iterable[PatternImplementation] = (),
        relationships: Iterable[PatternRelationship] = (),
    ) -> None:
        self._patterns: dict[str, DetailedPattern] = {}
        self._implementations: dict[str, list[PatternImplementation]] = {}
        self._relationships: dict[str, list[PatternRelationship]] = {}

        for pattern in patterns:
            self.add_pattern(pattern)
        for impl in implementations:
            self.add_implementation(impl)
        for rel in relationships:
            self.add_relationship(rel)

    def __len__(self) -> int:
        return len(self._patterns)

    def add_pattern(self, pattern: DetailedPattern) -> None:
        self._patterns[pattern.id] = pattern

    def add_implementation(self, implementation: PatternImplementation) -> None:
        self._implementations.setdefault(implementation.pattern_id, []).append(implementation)

    def add_relationship(self, relationship: PatternRelationship) -> None:
        self._relationships.setdefault(relationship.source_id, []).append(relationship)

    def categories(self) -> list[str]:
        return sorted({pattern.category for pattern in self._patterns.values()})

    async def list_patterns(
        self, categories: Iterable[str] | None = None
    ) -> list[PatternSummary]:
        wanted = _normalize_filter(categories)
        summaries = [
            pattern.summary()
            for pattern in self._patterns.values()
            if wanted is None or pattern.category.lower() in wanted
        ]
        return sorted(summaries, key=lambda s: s.name)

    async def get_pattern(self, pattern_id: str) -> DetailedPattern | None:
        return self._patterns.get(pattern_id)

    async def get_patterns(self, pattern_ids: Iterable[str]) -> dict[str, DetailedPattern]:
        return {pid: self._patterns[pid] for pid in pattern_ids if pid in self._patterns}

    async def get_implementations(
        self, pattern_id: str, language: str | None = None, limit: int | None = None
    ) -> list[PatternImplementation]:
        """Implementations ordered by language, then newest first."""
        items = self._implementations.get(pattern_id, [])
        if language:
            wanted = language.lower()
            items = [impl for impl in items if impl.language.lower() == wanted]

        # Two stable sorts: newest first, then by language.
        ordered = sorted(items, key=lambda impl: impl.created_at, reverse=True)
        ordered.sort(key=lambda impl: impl.language.lower())
        return ordered if limit is None else ordered[:limit]

    async def get_relationships(
        self, pattern_id: str, types: Iterable[str] | None = None
    ) -> list[PatternRelationship]:
        wanted = _normalize_filter(types)
        return [
            rel
            for rel in self._relationships.get(pattern_id, [])
            if wanted is None or rel.type.lower() in wanted
        ]


__all__ = ["InMemoryPatternStore"]
