"""Tests for search/models.py - request validation and record invariants."""

from __future__ import annotations

import pydantic
import pytest

from conftest import summary
from patternscout.search.models import Justification, MatchRecord, SearchRequest


class TestSearchRequest:
    def test_defaults(self) -> None:
        request = SearchRequest(query="observer")
        assert request.categories is None
        assert request.max_results is None
        assert len(request.id) == 32

    def test_ids_unique(self) -> None:
        assert SearchRequest(query="a").id != SearchRequest(query="a").id

    def test_categories_normalized(self) -> None:
        request = SearchRequest(query="x", categories=[" Creational ", "", "Structural"])
        assert request.categories == frozenset({"Creational", "Structural"})
        assert SearchRequest(query="x", categories=[]).categories is None
        assert SearchRequest(query="x", categories="Behavioral").categories == frozenset(
            {"Behavioral"}
        )

    def test_non_positive_max_results_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SearchRequest(query="x", max_results=0)

    def test_blank_language_is_none(self) -> None:
        assert SearchRequest(query="x", programming_language="  ").programming_language is None

    def test_frozen(self) -> None:
        request = SearchRequest(query="x")
        with pytest.raises(pydantic.ValidationError):
            request.query = "y"  # type: ignore[misc]

    def test_fetch_limit(self) -> None:
        assert SearchRequest(query="q").fetch_limit(5, 2) == 10
        assert SearchRequest(query="q", max_results=3).fetch_limit(5, 2) == 6
        assert SearchRequest(query="q", max_results=20).fetch_limit(5) == 20


class TestMatchRecord:
    def test_confidence_clamped(self) -> None:
        assert MatchRecord(summary("a"), 1.7, "keyword").confidence == 1.0
        assert MatchRecord(summary("a"), -0.2, "keyword").confidence == 0.0

    def test_metadata_defaults_to_confidence(self) -> None:
        record = MatchRecord(summary("a"), 0.4, "semantic")
        assert record.metadata is not None
        assert record.metadata.final_score == 0.4
        assert record.metadata.semantic_score is None


class TestJustification:
    def test_all_reasons(self) -> None:
        justification = Justification("primary", ["second", "third"])
        assert justification.all_reasons == ["primary", "second", "third"]
