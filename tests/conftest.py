from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

# Detect CI environment (GitHub Actions sets CI=true)
IS_CI = os.environ.get("CI", "").lower() == "true"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "local_only: marks tests that require local environment (skip in CI)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip local_only tests when running in CI."""
    if not IS_CI:
        return
    skip_ci = pytest.mark.skip(reason="Skipped in CI (requires local environment)")
    for item in items:
        if "local_only" in item.keywords:
            item.add_marker(skip_ci)


ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from patternscout.catalog import load_catalog  # noqa: E402
from patternscout.search.models import (  # noqa: E402
    MatchMetadata,
    MatchRecord,
    PatternSummary,
    SearchRequest,
)
from patternscout.store.memory import InMemoryPatternStore  # noqa: E402


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("PSCOUT_CONFIG", str(cfg_path))
    monkeypatch.setenv("PSCOUT_EMBEDDING__PROVIDER", "hash")
    monkeypatch.setenv("PSCOUT_LOG_LEVEL", "WARNING")
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, width=160)
    import patternscout.core.console as core_console
    import patternscout.main as ps_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(ps_main, "console", test_console)
    return test_console


@pytest.fixture
def catalog_store() -> InMemoryPatternStore:
    return load_catalog()


# ---------------------------------------------------------------------------
# Stub collaborators
# ---------------------------------------------------------------------------


def summary(pattern_id: str, name: str | None = None, category: str = "Behavioral") -> PatternSummary:
    return PatternSummary(
        id=pattern_id,
        name=name or pattern_id.replace("-", " ").title(),
        category=category,
        description=f"{pattern_id} description",
    )


def semantic_match(pattern: PatternSummary, score: float) -> MatchRecord:
    return MatchRecord(
        pattern=pattern,
        confidence=score,
        origin="semantic",
        reasons=[f"Semantic similarity: {score * 100:.1f}%"],
        metadata=MatchMetadata(final_score=score, semantic_score=score),
    )


def keyword_match(pattern: PatternSummary, raw: float) -> MatchRecord:
    confidence = min(raw / 10.0, 0.99)
    return MatchRecord(
        pattern=pattern,
        confidence=confidence,
        origin="keyword",
        reasons=[f'Pattern name contains "{pattern.name.lower()}"'],
        metadata=MatchMetadata(final_score=confidence, keyword_score=raw),
    )


class StubStrategy:
    """SearchStrategy returning canned matches and counting calls."""

    def __init__(
        self,
        matches: Iterable[MatchRecord] = (),
        broad: Iterable[MatchRecord] = (),
        *,
        error: Exception | None = None,
    ) -> None:
        self.matches = list(matches)
        self.broad = list(broad)
        self.error = error
        self.calls = 0
        self.broad_calls = 0

    async def search(self, request: SearchRequest) -> list[MatchRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.matches)

    async def broad_search(self, request: SearchRequest) -> list[MatchRecord]:
        self.broad_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.broad)


class StubProvider:
    """EmbeddingProvider with switchable readiness and failure modes."""

    def __init__(
        self,
        vector: list[float] | None = None,
        *,
        ready: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.vector = vector if vector is not None else [1.0, 0.0, 0.0]
        self.ready = ready
        self.error = error
        self.calls = 0

    @property
    def name(self) -> str:
        return "stub"

    def is_ready(self) -> bool:
        return self.ready

    async def embed(self, text: str) -> list[float]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.vector)


@pytest.fixture
def make_request() -> Any:
    def _make(query: str, **kwargs: Any) -> SearchRequest:
        return SearchRequest(query=query, **kwargs)

    return _make
