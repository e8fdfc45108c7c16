"""Local sentence-transformers embedding provider."""

from __future__ import annotations

import asyncio
from importlib import import_module
from pathlib import Path
from typing import TYPE_CHECKING, Any

from patternscout.core.console import get_logger
from patternscout.core.result import EmbeddingError

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

logger = get_logger(__name__)

_semantic_warned = False


def _warn_semantic_unavailable() -> None:
    """Warn about missing semantic dependencies (once)."""
    global _semantic_warned
    if _semantic_warned:
        return
    logger.warning(
        "sentence-transformers unavailable; install with `pip install patternscout[ai]`."
    )
    _semantic_warned = True


def _load_sentence_transformer(model_name: str) -> SentenceTransformer | None:
    try:
        module: Any = import_module("sentence_transformers")
    except ImportError:
        _warn_semantic_unavailable()
        return None

    cache_root = Path.home() / ".cache" / "patternscout" / "sentence-transformers"
    cache_root.mkdir(parents=True, exist_ok=True)

    try:
        return module.SentenceTransformer(model_name, cache_folder=str(cache_root))
    except Exception as exc:  # pragma: no cover - model download/runtime failure
        logger.debug("Failed to load embedding model %s: %s", model_name, exc)
        _warn_semantic_unavailable()
        return None


class SentenceTransformerProvider:
    """Embeds text with a lazily loaded SentenceTransformer model."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2") -> None:
        self.model_name = model_name
        self._model: SentenceTransformer | None = None
        self._load_attempted = False

    @property
    def name(self) -> str:
        return f"sentence-transformers:{self.model_name}"

    def _get_model(self) -> SentenceTransformer | None:
        if self._model is None and not self._load_attempted:
            self._load_attempted = True
            self._model = _load_sentence_transformer(self.model_name)
        return self._model

    def is_ready(self) -> bool:
        return self._get_model() is not None

    async def embed(self, text: str) -> list[float]:
        model = self._get_model()
        if model is None:
            raise EmbeddingError("Embedding model unavailable", context={"model": self.model_name})
        vectors = await asyncio.to_thread(
            model.encode, [text], show_progress_bar=False, convert_to_numpy=True
        )
        return [float(value) for value in vectors[0]]


__all__ = ["SentenceTransformerProvider"]
