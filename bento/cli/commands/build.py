"""``bento build`` — build every entry, optionally keep watching."""

from __future__ import annotations

from pathlib import Path

import typer

from bento.cli.common import configure_logging, load_build_config, run_build
from bento.config import BentoSettings
from bento.core.orchestrator import Orchestrator
from bento.core.watcher import WatchController


def build_cmd(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: bento.toml, bento.json or [tool.bento] in pyproject.toml).",
    ),
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help="Watch for changes and rebuild after the build.",
    ),
    clean: bool | None = typer.Option(
        None,
        "--clean/--no-clean",
        help="Override the config's clean-before-build setting.",
    ),
) -> None:
    """Build assets for production and development.

    Writes readable and minified versions of every script and stylesheet,
    plus ``manifest.json``, under the configured output directory.
    """
    settings = BentoSettings()
    configure_logging(settings.log_level)

    config = load_build_config(config_path, settings)
    if clean is not None:
        config = config.model_copy(update={"clean": clean})

    orchestrator = Orchestrator(config, settings=settings)
    run_build(orchestrator)

    if watch:
        WatchController(orchestrator).run_forever()
