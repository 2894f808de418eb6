"""CLI application entrypoint built with Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from LaunchReadiness.readiness import (
    ConfigurationError,
    LaunchReadinessError,
    LaunchReadinessPipeline,
    LaunchReport,
    OverallStatus,
    configure_otel,
    exit_code,
    load_engine_config,
    load_recorded_probes,
)

from .logging import configure_logging, install_excepthook, progress_spinner

CLI_VERSION = "0.1.0"

app = typer.Typer(help="Launch readiness assessment command line interface")

_STATUS_STYLES = {
    OverallStatus.READY: "bold green",
    OverallStatus.CONDITIONAL: "bold yellow",
    OverallStatus.NOT_READY: "bold red",
}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"launch-readiness {CLI_VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the CLI version and exit.",
    ),
) -> None:
    """Assess launch readiness from recorded probe results."""


def _render_summary(report: LaunchReport, console: Console) -> None:
    assessment = report.assessment
    style = _STATUS_STYLES[assessment.overall_status]
    console.print(
        f"[{style}]{assessment.overall_status.value}[/{style}] "
        f"score={assessment.readiness_score} "
        f"recommendation={report.launch_recommendation.value} "
        f"risk={report.risk.overall_risk.value} "
        f"environment={assessment.environment}"
    )

    suites = Table(title="Test suites")
    suites.add_column("Suite")
    suites.add_column("Category")
    suites.add_column("Status")
    suites.add_column("Results", justify="right")
    suites.add_column("Duration (ms)", justify="right")
    for suite in assessment.test_suites:
        suites.add_row(
            suite.name,
            suite.category.label,
            suite.status.value,
            str(suite.total),
            str(suite.duration_ms),
        )
    console.print(suites)

    if report.issues:
        issues = Table(title="Issues")
        issues.add_column("Id")
        issues.add_column("Severity")
        issues.add_column("Category")
        issues.add_column("Title")
        issues.add_column("Blocks launch")
        for issue in report.issues:
            issues.add_row(
                issue.id,
                issue.severity.value,
                issue.category,
                issue.title,
                "yes" if issue.blocks_launch else "no",
            )
        console.print(issues)

    for heading, items in (
        ("Recommendations", assessment.recommendations),
        ("Immediate actions", report.recommendations.immediate),
    ):
        if items:
            console.print(f"[bold]{heading}[/bold]")
            for item in items:
                console.print(f"  - {item}")


@app.command()
def assess(
    results: List[Path] = typer.Argument(..., help="Recorded probe result files or directories (YAML or JSON)."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to engine configuration YAML."),
    environment: Optional[str] = typer.Option(None, "--environment", "-e", help="Environment name to report."),
    probe_timeout: Optional[float] = typer.Option(
        None, "--probe-timeout", help="Per-probe timeout in seconds for asynchronous probes."
    ),
    parallel: bool = typer.Option(False, "--parallel", help="Run probes concurrently."),
    preset: Optional[str] = typer.Option(
        None, "--preset", help="Threshold preset to apply (full_report or issues_only)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON."),
    log_format: str = typer.Option("text", "--log-format", help="Log format (text or json)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Append logs to this file."),
) -> None:
    """Run recorded probes through the readiness pipeline and report the verdict."""

    if log_format not in {"text", "json"}:
        raise typer.BadParameter("log format must be 'text' or 'json'", param_hint="--log-format")
    logger = configure_logging(log_file, log_format, verbose)
    install_excepthook(logger)

    try:
        engine_config = load_engine_config(
            config,
            overrides={
                "environment": environment,
                "probe_timeout_seconds": probe_timeout,
                "parallel": parallel,
                "preset": preset,
            },
        )
        missing = [str(path) for path in results if not path.exists()]
        if missing:
            raise ConfigurationError(f"Result paths not found: {', '.join(missing)}")
        probes = load_recorded_probes(results)
        if engine_config.enable_otel:
            configure_otel()
        pipeline = LaunchReadinessPipeline(probes, config=engine_config)
        with progress_spinner(f"Assessing {len(probes)} probe(s)"):
            report = pipeline.run()
    except LaunchReadinessError as exc:
        logger.error("cli.assess.failed", extra={"error": str(exc)})
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=2) from exc

    logger.info(
        "cli.assess.complete",
        extra={
            "overall_status": report.overall_status.value,
            "readiness_score": report.assessment.readiness_score,
        },
    )
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        _render_summary(report, Console())
    raise typer.Exit(code=exit_code(report.overall_status))


@app.command()
def thresholds(
    config: Optional[Path] = typer.Option(None, "--config", help="Path to engine configuration YAML."),
    preset: Optional[str] = typer.Option(None, "--preset", help="Threshold preset to apply."),
) -> None:
    """Print the resolved decision table."""

    try:
        engine_config = load_engine_config(config, overrides={"preset": preset})
    except ConfigurationError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=2) from exc
    payload = {"environment": engine_config.environment, **engine_config.thresholds.to_dict()}
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def main() -> None:
    """Entrypoint for the CLI."""

    logging.captureWarnings(True)
    app(prog_name="launch-readiness")


__all__ = ["app", "main"]
