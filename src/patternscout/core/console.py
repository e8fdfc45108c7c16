"""Rich consoles and logging setup.

Results go to ``console`` (stdout); log records go to stderr through a
single ``RichHandler`` on the root logger, so ``--json`` output stays clean.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "patternscout"

console = Console()
stderr_console = Console(stderr=True)


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def setup_logging(level: str | int = logging.INFO, verbose: bool = False) -> logging.Logger:
    """Route all records through one stderr RichHandler; return the package logger.

    Safe to call repeatedly: an earlier RichHandler on the root logger is
    replaced, and other root handlers are left alone.
    """
    numeric_level = logging.DEBUG if verbose else _level(level)

    handler = RichHandler(
        console=stderr_console,
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(numeric_level)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)

    package = logging.getLogger(ROOT_LOGGER)
    package.setLevel(numeric_level)
    package.propagate = True
    return package


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or ROOT_LOGGER)
