"""Command line entry point: ``migrator analyze MODEL.yaml``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from migrator import __version__
from migrator.config import REPORT_FORMATS
from migrator.core.errors import MigratorError
from migrator.loader import load_model
from migrator.pipeline import run_pipeline
from migrator.report.writer import ReportWriter

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Analyze a parsed integration application model for migration.",
    no_args_is_help=True,
    add_completion=False,
)

# Exit codes
EXIT_OK = 0
EXIT_PIPELINE_ERRORS = 1
EXIT_FAILURE = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"migrator v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """Migration analysis for legacy integration platform applications."""
    pass


@app.command("analyze")
def analyze(
    model_path: Path = typer.Argument(..., help="Model document (YAML) to analyze."),
    report: Optional[Path] = typer.Option(None, "--report", "-r", help="Write the report to this file."),
    report_format: str = typer.Option("json", "--format", "-f", help="Report format: json or yaml."),
    graph: Optional[Path] = typer.Option(None, "--graph", help="Write the dependency graph (JSON) to this file."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
):
    """Resolve dependencies, decode target scenarios and report the result."""
    if log_level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(
            f"expected one of {', '.join(LOG_LEVELS)}",
            param_hint="--log-level",
        )
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if report_format not in REPORT_FORMATS:
        raise typer.BadParameter(
            f"expected one of {', '.join(REPORT_FORMATS)}",
            param_hint="--format",
        )

    try:
        loaded = load_model(model_path)
        result = run_pipeline(loaded)

        writer = ReportWriter(report_format)
        document = writer.build(loaded.resources, result.applications, result.context)
        if report is not None:
            writer.write(document, report)
            typer.echo(f"Report written to {report}")
        else:
            typer.echo(writer.render(document))

        if graph is not None and result.graph is not None:
            result.graph.save(str(graph))
            typer.echo(f"Graph written to {graph}")
    except MigratorError as e:
        logger.error("run_failed error=%s", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_FAILURE)

    summary = document["summary"]
    typer.echo(
        f"Resources: {summary['resources']} | Relationships: {summary['relationships']} "
        f"| Scenarios: {summary['scenarios']} | Errors: {summary['errors']}",
        err=True,
    )

    if result.failed:
        for error in result.context:
            typer.echo(str(error), err=True)
        raise typer.Exit(code=EXIT_PIPELINE_ERRORS)
