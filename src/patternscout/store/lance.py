"""LanceDB vector index for pattern embeddings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from importlib import import_module
from pathlib import Path
from typing import Any, Protocol, cast

import numpy as np

from patternscout.core.console import get_logger
from patternscout.core.result import CapabilityMissingError
from patternscout.search.models import VectorHit

from .vector import cosine_scores

logger = get_logger(__name__)

TABLE_NAME = "pattern_vectors"


class LanceModelBase(Protocol):
    def __init__(self, **data: Any) -> None: ...


class LanceTable(Protocol):
    def add(self, data: list[Any]) -> Any: ...

    def delete(self, where: str) -> Any: ...

    def search(self, query: list[float]) -> Any: ...


class LanceDBConnectionProtocol(Protocol):
    def table_names(self) -> list[str]: ...

    def create_table(self, name: str, schema: Any, exist_ok: bool = ...) -> LanceTable: ...

    def open_table(self, name: str) -> LanceTable: ...


class LanceDBModuleProtocol(Protocol):
    def connect(self, uri: str) -> LanceDBConnectionProtocol: ...


class PatternVectorRow(Protocol):
    id: str
    category: str
    embedding: list[float] | None


def load_lancedb_dependencies() -> tuple[LanceDBModuleProtocol, type[LanceModelBase]] | None:
    """Load LanceDB dependencies, returning None if unavailable."""
    try:
        lancedb = import_module("lancedb")
        pydantic_module = import_module("lancedb.pydantic")
        lance_model = cast(type[LanceModelBase], pydantic_module.LanceModel)
    except Exception as exc:
        logger.debug("LanceDB unavailable: %s", exc)
        return None
    return cast(LanceDBModuleProtocol, lancedb), lance_model


def _build_record_model(base: type[LanceModelBase]) -> type[LanceModelBase]:
    class PatternVectorRecord(base):  # type: ignore[misc,valid-type]
        id: str
        category: str
        embedding: list[float] | None

    return PatternVectorRecord


class LanceVectorIndex:
    """Vector index persisted in a LanceDB table.

    The connection and table are cached after first use. Candidates are
    re-scored with cosine similarity so scores match the in-memory index.
    """

    def __init__(
        self,
        db_path: Path,
        lancedb_module: LanceDBModuleProtocol,
        lance_model_base: type[LanceModelBase],
    ) -> None:
        self._db_path = db_path.expanduser()
        self._db_path.mkdir(parents=True, exist_ok=True)
        self._lancedb = lancedb_module
        self._model_cls = _build_record_model(lance_model_base)
        self._connection: LanceDBConnectionProtocol | None = None
        self._table: LanceTable | None = None
        self._dimension: int | None = None

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @classmethod
    def open(cls, db_path: Path) -> LanceVectorIndex:
        deps = load_lancedb_dependencies()
        if deps is None:
            raise CapabilityMissingError(
                "LanceDB backend requested but lancedb is not installed",
                context={"hint": "pip install patternscout[ai]"},
            )
        lancedb_module, lance_model = deps
        return cls(db_path, lancedb_module, lance_model)

    def _get_connection(self) -> LanceDBConnectionProtocol:
        if self._connection is None:
            self._connection = self._lancedb.connect(str(self._db_path))
        return self._connection

    def _ensure_table(self) -> LanceTable:
        if self._table is None:
            db = self._get_connection()
            if TABLE_NAME in db.table_names():
                self._table = db.open_table(TABLE_NAME)
            else:
                self._table = db.create_table(TABLE_NAME, schema=self._model_cls, exist_ok=True)
        return self._table

    def add(self, pattern_id: str, embedding: Sequence[float], category: str) -> None:
        if len(embedding) == 0:
            raise ValueError("embedding must be a non-empty vector")
        if self._dimension is not None and len(embedding) != self._dimension:
            raise ValueError(f"Embedding dimension mismatch: {self._dimension} != {len(embedding)}")
        table = self._ensure_table()
        escaped = pattern_id.replace("'", "''")
        table.delete(f"id = '{escaped}'")
        record = self._model_cls(
            id=pattern_id, category=category, embedding=[float(v) for v in embedding]
        )
        table.add([record])
        self._dimension = len(embedding)

    async def nearest_neighbors(
        self,
        embedding: Sequence[float],
        categories: Iterable[str] | None,
        k: int,
    ) -> list[VectorHit]:
        if k <= 0:
            return []
        wanted = {c.lower() for c in categories} if categories is not None else None
        table = self._ensure_table()

        # Over-fetch when post-filtering by category.
        fetch_limit = k * 3 if wanted is not None else k
        query = [float(v) for v in embedding]
        rows = cast(
            Sequence[PatternVectorRow],
            table.search(query).limit(fetch_limit).to_pydantic(self._model_cls),
        )

        candidates = [
            row
            for row in rows
            if row.embedding and (wanted is None or row.category.lower() in wanted)
        ]
        if not candidates:
            return []

        matrix = np.asarray([row.embedding for row in candidates], dtype=np.float32)
        scores = cosine_scores(matrix, np.asarray(query, dtype=np.float32))
        hits = [
            VectorHit(id=row.id, score=float(score))
            for row, score in zip(candidates, scores, strict=True)
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:k]


__all__ = ["LanceVectorIndex", "load_lancedb_dependencies"]
