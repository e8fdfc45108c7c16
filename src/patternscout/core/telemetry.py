"""Telemetry context passed to every pipeline component.

This module provides:
- Telemetry: logger plus optional OpenTelemetry tracer, handed to each
  component constructor instead of reaching for a global singleton
- get_tracer(): lazily configure an OTLP tracer when the optional
  opentelemetry packages are installed and export is enabled
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from patternscout.core.console import ROOT_LOGGER, get_logger

if TYPE_CHECKING:
    from patternscout.core.config import InfraConfig

QUERY_PREVIEW_CHARS = 50

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# OpenTelemetry Protocol Types
# -----------------------------------------------------------------------------


class SpanProtocol(Protocol):
    def set_attribute(self, key: str, value: object) -> None: ...

    def add_event(self, name: str, attributes: Mapping[str, object] | None = None) -> None: ...


class TracerProtocol(Protocol):
    def start_as_current_span(self, name: str) -> AbstractContextManager[SpanProtocol]: ...


class _NullSpan:
    """Span stand-in used when tracing is not configured."""

    def set_attribute(self, key: str, value: object) -> None:
        _ = key, value

    def add_event(self, name: str, attributes: Mapping[str, object] | None = None) -> None:
        _ = name, attributes


def preview(text: str, limit: int = QUERY_PREVIEW_CHARS) -> str:
    """Truncate query text for log lines."""
    return text if len(text) <= limit else text[:limit]


def elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


# -----------------------------------------------------------------------------
# Telemetry Context
# -----------------------------------------------------------------------------


@dataclass
class Telemetry:
    """Logging and tracing context for one component.

    Components receive a Telemetry in their constructor. `child()` derives a
    context for a collaborator that shares the tracer but logs under its own
    name.
    """

    logger: logging.Logger = field(default_factory=lambda: get_logger(ROOT_LOGGER))
    tracer: TracerProtocol | None = None

    @classmethod
    def for_component(cls, name: str, tracer: TracerProtocol | None = None) -> Telemetry:
        return cls(logger=get_logger(f"{ROOT_LOGGER}.{name}"), tracer=tracer)

    def child(self, name: str) -> Telemetry:
        return Telemetry(logger=get_logger(f"{self.logger.name}.{name}"), tracer=self.tracer)

    @contextmanager
    def span(self, name: str, **attributes: object) -> Iterator[SpanProtocol]:
        """Open a tracing span, or a no-op span when tracing is off."""
        if self.tracer is None:
            yield _NullSpan()
            return
        with self.tracer.start_as_current_span(name) as span:
            for key, value in attributes.items():
                span.set_attribute(key, value)
            yield span

    @contextmanager
    def timed(self, operation: str, query: str = "") -> Iterator[None]:
        """Log the duration of the wrapped block at debug level."""
        started = time.perf_counter()
        yield
        self.completed(operation, query, started)

    def failure(self, operation: str, query: str, started: float, error: BaseException) -> None:
        """Log a recoverable failure with operation, query preview, duration and error."""
        self.logger.warning(
            "%s failed after %.1fms (query=%r): %s",
            operation,
            elapsed_ms(started),
            preview(query),
            error,
        )

    def completed(self, operation: str, query: str, started: float, **fields: object) -> None:
        """Log a completed operation at debug level."""
        details = ", ".join(f"{key}={value}" for key, value in fields.items())
        self.logger.debug(
            "%s completed in %.1fms (query=%r) %s",
            operation,
            elapsed_ms(started),
            preview(query),
            details,
        )


# -----------------------------------------------------------------------------
# OpenTelemetry Integration
# -----------------------------------------------------------------------------

_otel_tracer: TracerProtocol | None = None


def get_tracer(infra: InfraConfig | None) -> TracerProtocol | None:
    """Get or create an OpenTelemetry tracer.

    Returns None if OpenTelemetry is not installed or export is not enabled.
    """
    global _otel_tracer

    if infra is None or not infra.otel_export_enabled or not infra.otel_endpoint:
        return None
    if _otel_tracer is not None:
        return _otel_tracer

    try:
        from opentelemetry import trace as trace_module  # pyright: ignore[reportMissingImports]
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
        )
    except ImportError:
        logger.debug("OpenTelemetry packages not installed; tracing disabled.")
        return None

    try:
        resource = Resource.create({"service.name": infra.otel_service_name})
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(endpoint=f"{infra.otel_endpoint.rstrip('/')}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace_module.set_tracer_provider(provider)
    except Exception as exc:  # pragma: no cover - exporter misconfiguration
        logger.debug("Failed to configure OpenTelemetry: %s", exc)
        return None

    _otel_tracer = trace_module.get_tracer("patternscout.search")
    return _otel_tracer


__all__ = [
    "QUERY_PREVIEW_CHARS",
    "SpanProtocol",
    "Telemetry",
    "TracerProtocol",
    "elapsed_ms",
    "get_tracer",
    "preview",
]
