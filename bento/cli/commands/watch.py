"""``bento watch`` — full build, then rebuild files as they change."""

from __future__ import annotations

from pathlib import Path

import typer

from bento.cli.common import configure_logging, console, load_build_config, run_build
from bento.config import BentoSettings
from bento.core.orchestrator import Orchestrator
from bento.core.watcher import WatchController


def watch_cmd(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file.",
    ),
) -> None:
    """Watch for changes and rebuild automatically. Stop with Ctrl+C."""
    settings = BentoSettings()
    configure_logging(settings.log_level)

    config = load_build_config(config_path, settings)
    orchestrator = Orchestrator(config, settings=settings)
    run_build(orchestrator)

    controller = WatchController(orchestrator)
    watched = controller.start()
    if not watched:
        console.print("[yellow]No entry directories exist; nothing to watch.[/yellow]")
        controller.stop()
        return
    console.print(
        f"[cyan]Watching[/cyan] {', '.join(e.name for e in watched)} "
        "[dim](Ctrl+C to stop)[/dim]"
    )
    controller.run_forever()
