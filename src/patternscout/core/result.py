"""Result type and error hierarchy shared by the search pipeline.

Strategies and the coordinator return ``Result`` from their ``*_safe``
entry points; the plain entry points collapse an ``Err`` to an empty list:

    match await handler.search_safe(request):
        case Ok(matches):
            ...
        case Err(error):
            logger.warning("strategy failed: %s", error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def unwrap_or(self, default: T) -> T:
        return default


Result = Ok[T] | Err[E]


class PatternScoutError(Exception):
    """Base error. ``context`` is rendered as ``[k=v, ...]`` after the message."""

    def __init__(self, message: str, *, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"


class ConfigurationError(PatternScoutError):
    """Unknown provider name, missing server URL, unreadable config file."""


class CapabilityMissingError(PatternScoutError):
    """An optional backend (LanceDB, sentence-transformers) is required but absent."""


class StrategyError(PatternScoutError):
    """One search strategy failed; it contributes zero records."""


class EmbeddingError(PatternScoutError):
    """Embedding provider failed or returned an empty vector."""


class RefinementError(PatternScoutError):
    """Fuzzy refinement could not score one recommendation."""


class CoordinatorError(PatternScoutError):
    """Uncaught failure inside the search coordinator."""


__all__ = [
    "CapabilityMissingError",
    "ConfigurationError",
    "CoordinatorError",
    "EmbeddingError",
    "Err",
    "Ok",
    "PatternScoutError",
    "RefinementError",
    "Result",
    "StrategyError",
]
