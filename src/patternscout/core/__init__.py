"""Core shared infrastructure for patternscout.

This package contains foundational utilities:
    - config: Application configuration management
    - console: Rich console output and logging
    - result: Error handling patterns
    - telemetry: Logging/tracing context handed to pipeline components
"""

from __future__ import annotations

from . import config, console

__all__ = ["config", "console"]
