"""Deterministic hash-based pseudo-embeddings.

Used when no model backend is available and as the fallback whenever a real
provider fails or returns an empty vector. The vectors carry only lexical
signal but are stable across processes, which keeps tests reproducible.
"""

from __future__ import annotations

import math

import numpy as np

DEFAULT_DIMENSION = 384
MAX_CHARS_PER_WORD = 10

_INT32_MASK = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & 0x80000000 else value


def word_hash(text: str) -> int:
    """31-multiplier string hash folded to a signed 32-bit int, returned as abs."""
    acc = 0
    for char in text:
        acc = _to_int32((acc << 5) - acc + ord(char))
    return abs(acc)


def hash_embedding(text: str, dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """Build a unit-length pseudo-embedding from the words of `text`."""
    vector = np.zeros(dimension, dtype=np.float64)
    words = text.lower().split()

    for i, word in enumerate(words):
        hashed = word_hash(word)
        for j, char in enumerate(word[:MAX_CHARS_PER_WORD]):
            position = (hashed + j + i * 7) % dimension
            vector[position] += (ord(char) / 255) * 0.5 + math.sin(hashed * j) * 0.3

    norm = float(np.linalg.norm(vector))
    if norm > 0:
        vector /= norm
    return [float(value) for value in vector]


class HashEmbeddingProvider:
    """EmbeddingProvider backed by `hash_embedding`. Always ready."""

    def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
        self._dimension = dimension

    @property
    def name(self) -> str:
        return "hash"

    @property
    def dimension(self) -> int:
        return self._dimension

    def is_ready(self) -> bool:
        return True

    async def embed(self, text: str) -> list[float]:
        return hash_embedding(text, self._dimension)


__all__ = [
    "DEFAULT_DIMENSION",
    "HashEmbeddingProvider",
    "hash_embedding",
    "word_hash",
]
