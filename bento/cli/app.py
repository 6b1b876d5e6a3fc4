"""Main Typer application — imports and registers all CLI commands.

Entry point: ``bento`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from bento import __version__
from bento.cli.commands.build import build_cmd
from bento.cli.commands.init import init_cmd
from bento.cli.commands.watch import watch_cmd

app = typer.Typer(
    name="bento",
    help="Bento - A custom bundler specifically designed for WordPress plugins.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Build assets for production and development.")(build_cmd)
app.command(name="watch", help="Watch for changes and rebuild automatically.")(watch_cmd)
app.command(name="init", help="Initialize bento.toml in the current directory.")(init_cmd)


@app.command(name="version", help="Show the bento version.")
def version_cmd() -> None:
    typer.echo(f"bento {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
