"""Integration tests for the migrator CLI."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from migrator.cli import EXIT_FAILURE, EXIT_OK, EXIT_PIPELINE_ERRORS, app

runner = CliRunner()


class TestAnalyzeCommand:
    """Tests for 'migrator analyze'."""

    def test_analyze_writes_json_report(self, orders_model_path: Path, tmp_path: Path) -> None:
        """A clean model exits 0 and writes the report file."""
        report_path = tmp_path / "report.json"

        result = runner.invoke(app, ["analyze", str(orders_model_path), "--report", str(report_path)])

        assert result.exit_code == EXIT_OK
        assert "Report written" in result.output
        report = json.loads(report_path.read_text())
        assert report["summary"]["errors"] == 0
        assert report["applications"][0]["scenarios"][0]["name"] == "ReceiveOrders"

    def test_analyze_yaml_report(self, orders_model_path: Path, tmp_path: Path) -> None:
        """--format yaml writes YAML."""
        report_path = tmp_path / "report.yaml"

        result = runner.invoke(
            app,
            ["analyze", str(orders_model_path), "--report", str(report_path), "--format", "yaml"],
        )

        assert result.exit_code == EXIT_OK
        assert yaml.safe_load(report_path.read_text())["summary"]["scenarios"] == 1

    def test_analyze_prints_report_without_path(self, orders_model_path: Path) -> None:
        """Without --report the report goes to stdout."""
        result = runner.invoke(app, ["analyze", str(orders_model_path)])

        assert result.exit_code == EXIT_OK
        assert '"summary"' in result.output

    def test_analyze_writes_graph(self, orders_model_path: Path, tmp_path: Path) -> None:
        """--graph saves the relationship graph."""
        graph_path = tmp_path / "graph.json"

        result = runner.invoke(
            app,
            [
                "analyze",
                str(orders_model_path),
                "--report",
                str(tmp_path / "report.json"),
                "--graph",
                str(graph_path),
            ],
        )

        assert result.exit_code == EXIT_OK
        assert json.loads(graph_path.read_text())["edges"]

    def test_pipeline_errors_exit_1(self, tmp_path: Path) -> None:
        """A model-integrity error fails the run with exit code 1."""
        model_path = tmp_path / "model.yaml"
        model_path.write_text("resources:\n  - {type: documentschema, key: orphan}\n")

        result = runner.invoke(app, ["analyze", str(model_path), "--report", str(tmp_path / "r.json")])

        assert result.exit_code == EXIT_PIPELINE_ERRORS
        assert "orphan" in result.output

    def test_invalid_model_exit_2(self, tmp_path: Path) -> None:
        """A document that cannot be loaded exits 2."""
        model_path = tmp_path / "model.yaml"
        model_path.write_text("resources:\n  - {type: nonsense, key: x}\n")

        result = runner.invoke(app, ["analyze", str(model_path)])

        assert result.exit_code == EXIT_FAILURE
        assert "Error:" in result.output

    def test_missing_model_exit_2(self, tmp_path: Path) -> None:
        """A missing model file exits 2."""
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.yaml")])

        assert result.exit_code == EXIT_FAILURE

    def test_unknown_format(self, orders_model_path: Path) -> None:
        """Unsupported report formats are rejected."""
        result = runner.invoke(app, ["analyze", str(orders_model_path), "--format", "xml"])

        assert result.exit_code != 0

    def test_unknown_log_level(self, orders_model_path: Path) -> None:
        """Unknown log levels are a usage error, not a traceback."""
        result = runner.invoke(app, ["analyze", str(orders_model_path), "--log-level", "LOUD"])

        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)

    def test_log_level_is_case_insensitive(self, orders_model_path: Path) -> None:
        """Lower-case level names are accepted."""
        result = runner.invoke(app, ["analyze", str(orders_model_path), "--log-level", "debug"])

        assert result.exit_code == EXIT_OK

    def test_unwritable_graph_exit_2(self, orders_model_path: Path, tmp_path: Path) -> None:
        """A graph path that cannot be written exits 2 with an error message."""
        result = runner.invoke(
            app,
            [
                "analyze",
                str(orders_model_path),
                "--report",
                str(tmp_path / "report.json"),
                "--graph",
                str(tmp_path),
            ],
        )

        assert result.exit_code == EXIT_FAILURE
        assert "Error:" in result.output


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        """Prints the package version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "migrator v" in result.output
