"""Rich terminal renderer for build reports.

Color scheme
------------
- green     : DONE
- red       : FAILED
- yellow    : warnings / in-progress states
- dim       : IDLE
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bento.models.build import BuildReport, BuildState, WarningCategory

_STATE_ICONS: dict[BuildState, str] = {
    BuildState.DONE: "[green]DONE[/green]",
    BuildState.FAILED: "[bold red]FAILED[/bold red]",
    BuildState.IDLE: "[dim]IDLE[/dim]",
    BuildState.CLEANING: "[yellow]CLEANING[/yellow]",
    BuildState.PREPARING: "[yellow]PREPARING[/yellow]",
    BuildState.PROCESSING: "[yellow]PROCESSING[/yellow]",
    BuildState.FINALIZING: "[yellow]FINALIZING[/yellow]",
}

_CATEGORY_LABELS: dict[WarningCategory, str] = {
    WarningCategory.MISSING_ENTRY: "missing entry",
    WarningCategory.TOOL_UNAVAILABLE: "tool unavailable",
    WarningCategory.TRANSFORM_FAILURE: "transform failure",
    WarningCategory.IO_FAILURE: "I/O failure",
    WarningCategory.DEPENDENCY_INSTALL_FAILURE: "dependency install",
}


class ReportRenderer:
    """Renders ``BuildReport`` as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_report(self, report: BuildReport, *, show_artifacts: bool = True) -> Panel:
        """Render a report as a Panel with artifact and warning tables."""
        parts: list = []
        if show_artifacts and report.artifacts:
            parts.append(self._build_artifact_table(report))
        if report.warnings:
            if parts:
                parts.append(Text(""))
            parts.append(self._build_warning_table(report))

        summary = "  |  ".join([
            f"[bold]Session:[/bold] {report.session_id}",
            f"[bold]Kind:[/bold] {report.kind.value}",
            f"[bold]State:[/bold] {_STATE_ICONS.get(report.state, report.state.value)}",
            f"[bold]Files:[/bold] {report.processed_count}",
            f"[bold]Warnings:[/bold] "
            + (f"[yellow]{len(report.warnings)}[/yellow]" if report.warnings else "0"),
        ])
        if report.dependencies:
            summary += f"\n[bold]Dependencies:[/bold] {escape(', '.join(sorted(report.dependencies)))}"
        if report.error:
            summary += f"\n[bold red]Error:[/bold red] {escape(report.error)}"
        if parts:
            parts.append(Text(""))
        parts.append(Text.from_markup(summary))

        return Panel(
            Group(*parts),
            title="[bold]Bento Build[/bold]",
            border_style="green" if report.succeeded else "red",
            padding=(1, 2),
        )

    def _build_artifact_table(self, report: BuildReport) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Source", min_width=20)
        table.add_column("Unminified", style="green")
        table.add_column("Minified", style="green")
        for source, artifact in sorted(report.artifacts.items()):
            table.add_row(Text(source), Text(artifact.unminified), Text(artifact.minified))
        return table

    def _build_warning_table(self, report: BuildReport) -> Table:
        table = Table(show_header=True, header_style="bold yellow", expand=True)
        table.add_column("Category", style="yellow", width=20)
        table.add_column("Where", min_width=12)
        table.add_column("Message")
        for warning in report.warnings:
            where = "/".join(p for p in (warning.entry, warning.path) if p) or "-"
            table.add_row(
                _CATEGORY_LABELS.get(warning.category, warning.category.value),
                Text(where),
                Text(warning.message),
            )
        return table

    def print_report(self, report: BuildReport, *, show_artifacts: bool = True) -> None:
        self.console.print(self.render_report(report, show_artifacts=show_artifacts))
