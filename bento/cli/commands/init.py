"""``bento init`` — write a default ``bento.toml``."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from bento.core.config_loader import render_default_config

console = Console()


def init_cmd(
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Directory to create bento.toml in.",
    ),
    text_domain: str = typer.Option(
        "your-plugin-textdomain",
        "--text-domain",
        help="Plugin text domain (for translations).",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing bento.toml.",
    ),
) -> None:
    """Initialize bento.toml in the given directory."""
    config_path = directory / "bento.toml"

    if config_path.exists() and not force:
        console.print("[yellow]bento.toml already exists[/yellow]")
        return

    directory.mkdir(parents=True, exist_ok=True)
    config_path.write_text(render_default_config(text_domain), encoding="utf-8")
    console.print(f"[green]Created {config_path}[/green]")
    console.print("[dim]Edit the config file to customize your build settings[/dim]")
