"""CLI smoke tests through typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from typer.testing import CliRunner

from patternscout import __version__
from patternscout.main import app


class TestVersion:
    def test_version(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in capture_console.export_text()


class TestTune:
    def test_shows_weights(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["tune", "implement code example"])
        assert result.exit_code == 0
        output = capture_console.export_text()
        assert "specific" in output
        assert "0.150" in output
        assert "0.850" in output


class TestCatalog:
    def test_lists_patterns(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["catalog"])
        assert result.exit_code == 0
        output = capture_console.export_text()
        assert "Singleton" in output
        assert "Mediator" in output

    def test_category_filter(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["catalog", "--category", "structural"])
        assert result.exit_code == 0
        output = capture_console.export_text()
        assert "Adapter" in output
        assert "Singleton" not in output


class TestSearch:
    def test_table_output(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["search", "factory method pattern", "--limit", "3"])
        assert result.exit_code == 0
        output = capture_console.export_text()
        assert "Recommendations" in output
        assert "Analyze your current code structure" in output

    def test_json_output(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["search", "observer notify subscribers", "--json", "-l", "2", "--no-fuzzy"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert 0 < len(payload) <= 2
        assert [item["rank"] for item in payload] == list(range(1, len(payload) + 1))
        assert all(item["justification"]["fuzzy_reasoning"] == [] for item in payload)

    def test_invalid_limit(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["search", "observer", "--limit", "0"])
        assert result.exit_code != 0

    def test_no_results(self, runner: CliRunner, capture_console: Console) -> None:
        result = runner.invoke(app, ["search", "   "])
        assert result.exit_code == 0
        assert "No matching patterns found" in capture_console.export_text()


class TestConfigCommand:
    def test_shows_source(
        self, runner: CliRunner, capture_console: Console, isolate_config: Path
    ) -> None:
        isolate_config.write_text("[search]\nmax_results = 7\n", encoding="utf-8")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        output = capture_console.export_text()
        assert "File loaded: yes" in output
        assert "'max_results': 7" in output

    def test_safe_mode_banner(
        self, runner: CliRunner, capture_console: Console, isolate_config: Path
    ) -> None:
        isolate_config.write_text("[search\n", encoding="utf-8")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Safe Mode" in capture_console.export_text()
