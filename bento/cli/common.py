"""Helpers shared by the CLI commands: logging, config loading, exit codes."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from bento.config import BentoSettings
from bento.core.config_loader import load_config
from bento.core.errors import BuildFailedError, ConfigurationError
from bento.core.orchestrator import Orchestrator
from bento.models.build import BuildReport
from bento.models.config import BuildConfig
from bento.monitor.renderer import ReportRenderer

# Exit codes. 2 is left to Click for usage errors.
EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_CONFIG_ERROR = 3

console = Console()


def configure_logging(level: str) -> None:
    """Route log records through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def load_build_config(config_path: Path | None, settings: BentoSettings) -> BuildConfig:
    """Load the build config or exit with ``EXIT_CONFIG_ERROR``."""
    if config_path is None and settings.config_file.is_file():
        config_path = settings.config_file
    try:
        return load_config(config_path)
    except ConfigurationError as exc:
        console.print(f"[bold red]Error loading config file:[/bold red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc


def run_build(orchestrator: Orchestrator) -> BuildReport:
    """Run a full build, print the summary, or exit with ``EXIT_BUILD_FAILED``."""
    renderer = ReportRenderer(console=console)
    try:
        report = orchestrator.build()
    except BuildFailedError as exc:
        if exc.report is not None:
            renderer.print_report(exc.report, show_artifacts=False)
        console.print(f"[bold red]{escape(str(exc))}[/bold red]", highlight=False)
        raise typer.Exit(code=EXIT_BUILD_FAILED) from exc

    renderer.print_report(report)
    return report
