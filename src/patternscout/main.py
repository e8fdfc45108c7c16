from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import typer
from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .catalog import load_catalog
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging
from .core.result import PatternScoutError
from .search.alpha import AlphaTuner
from .search.factory import build_coordinator
from .search.models import Recommendation, SearchRequest

app = typer.Typer(help="pscout: recommend design patterns for a problem description.")
logger = logging.getLogger(__name__)


@dataclass
class AppState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", help="Path to a pscout config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    loaded_config, meta = load_config(config_path=config)
    app_logger = setup_logging(level=loaded_config.log_level, verbose=verbose)

    ctx.obj = AppState(config=loaded_config, config_meta=meta, logger=app_logger)

    if meta.error:
        console.print(
            Panel(
                f"[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
                f"Failed to load {meta.path}:\n{meta.error}\n\n"
                f"[yellow]Using default settings.[/yellow]",
                border_style="red",
            )
        )
    else:
        app_logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )


async def _run_search(config: AppConfig, request: SearchRequest) -> list[Recommendation]:
    coordinator = await build_coordinator(config)
    return await coordinator.search(request)


def _render_recommendations(recommendations: list[Recommendation]) -> None:
    table = Table(title="Recommendations", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Pattern", style="cyan", no_wrap=True)
    table.add_column("Category", style="magenta")
    table.add_column("Confidence", justify="right")
    table.add_column("Why", style="white")

    for rec in recommendations:
        table.add_row(
            str(rec.rank),
            rec.pattern.name,
            rec.pattern.category,
            f"{rec.confidence:.2f}",
            rec.justification.primary_reason,
        )
    console.print(table)

    top = recommendations[0]
    lines = [top.justification.problem_fit, ""]
    lines.extend(f"- {step}" for step in top.implementation.steps)
    if top.justification.fuzzy_reasoning:
        lines.append("")
        lines.extend(f"* {reason}" for reason in top.justification.fuzzy_reasoning)
    if top.alternatives:
        lines.append("")
        lines.append(
            "Alternatives: " + ", ".join(f"{alt.name} ({alt.reason})" for alt in top.alternatives)
        )
    console.print(Panel(Text("\n".join(lines)), title=top.pattern.name, box=box.SIMPLE))

    for example in top.implementation.examples[:1]:
        console.print(Panel(Text(example.code), title=example.title, subtitle=example.explanation))


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Problem description to match against patterns."),
    category: list[str] | None = typer.Option(
        None, "--category", "-c", help="Restrict to a pattern category (repeatable)."
    ),
    limit: int | None = typer.Option(
        None, "--limit", "-l", min=1, help="Maximum number of recommendations."
    ),
    language: str | None = typer.Option(
        None, "--language", "-L", help="Programming language for code examples."
    ),
    no_fuzzy: bool = typer.Option(False, "--no-fuzzy", help="Skip fuzzy-logic refinement."),
    as_json: bool = typer.Option(False, "--json", help="Emit recommendations as JSON."),
) -> None:
    """Recommend patterns for QUERY."""
    state: AppState = ctx.obj
    config = state.config
    if no_fuzzy:
        config = config.model_copy(
            update={"search": config.search.model_copy(update={"use_fuzzy_refinement": False})}
        )

    request = SearchRequest(
        query=query,
        categories=frozenset(category) if category else None,
        max_results=limit,
        programming_language=language,
    )

    try:
        recommendations = asyncio.run(_run_search(config, request))
    except PatternScoutError as exc:
        console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc

    if as_json:
        console.print_json(json.dumps([asdict(rec) for rec in recommendations]))
        return

    if not recommendations:
        console.print("[yellow]No matching patterns found.[/yellow]")
        return
    _render_recommendations(recommendations)


@app.command("tune")
def tune(query: str = typer.Argument(..., help="Query to analyze.")) -> None:
    """Show the fusion weights chosen for QUERY."""
    result = AlphaTuner().tune(query)
    analysis = result.analysis

    table = Table(title="Fusion weights", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("query_type", result.query_type)
    table.add_row("semantic_weight", f"{result.semantic_weight:.3f}")
    table.add_row("keyword_weight", f"{result.keyword_weight:.3f}")
    table.add_row("confidence", f"{result.confidence:.2f}")
    for key, value in asdict(analysis).items():
        table.add_row(key, f"{value:.3f}" if isinstance(value, float) else str(value))
    console.print(table)


@app.command("catalog")
def catalog(
    category: str | None = typer.Option(None, "--category", "-c", help="Filter by category."),
) -> None:
    """List the built-in pattern catalog."""
    store = load_catalog()
    patterns = asyncio.run(store.list_patterns([category] if category else None))

    table = Table(title="Pattern catalog", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Pattern", style="cyan", no_wrap=True)
    table.add_column("Category", style="magenta")
    table.add_column("Complexity")
    table.add_column("Description", style="white")
    for pattern in patterns:
        table.add_row(pattern.name, pattern.category, pattern.complexity, pattern.description)
    console.print(table)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: AppState = ctx.obj
    config = state.config
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in config.model_dump().items():
        table.add_row(key, str(value))

    console.print(table)

    meta_lines = [
        f"Path: {meta.path}",
        "File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)",
    ]

    if meta.env_overrides:
        meta_lines.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))

    console.print(Panel("\n".join(meta_lines), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the patternscout version."""
    console.print(__version__)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
