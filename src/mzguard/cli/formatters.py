"""Terminal rendering with rich."""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mzguard.schemas.plugins import ConflictReport, DependencyReport, PopularityEnrichment, ProjectAnalysis

SEVERITY_STYLES = {"warning": "yellow", "info": "blue", "error": "red"}


def _severity(severity: str) -> str:
    style = SEVERITY_STYLES[severity]
    return f"[{style}]{severity}[/{style}]"


class OutputFormatter:
    """Prints analysis results as rich tables."""

    def __init__(self, force_color: bool = False, file=None):
        self.console = Console(force_terminal=force_color or None, file=file or sys.stdout)

    def _conflict_table(self, report: ConflictReport) -> Table:
        table = Table(
            title=f"Override Conflicts ({report.total_overrides} overrides, {report.health})",
            header_style="bold magenta",
        )
        table.add_column("Severity")
        table.add_column("Method", style="cyan")
        table.add_column("Plugins (load order)", style="green")
        for conflict in report.conflicts:
            table.add_row(
                _severity(conflict.severity), escape(conflict.method), escape(" → ".join(conflict.plugins))
            )
        return table

    def _dependency_table(self, report: DependencyReport) -> Table:
        table = Table(title=f"Dependency Issues ({report.health})", header_style="bold magenta")
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Plugin", style="cyan")
        table.add_column("Message")
        for issue in report.issues:
            table.add_row(
                _severity(issue.severity), issue.type, escape(issue.plugin_name), escape(issue.message)
            )
        return table

    def print_analysis_tables(self, analysis: ProjectAnalysis) -> None:
        """Print whichever reports the analysis contains, then scan warnings."""
        if analysis.conflicts is not None:
            self.console.print(self._conflict_table(analysis.conflicts))
        if analysis.dependencies is not None:
            self.console.print(self._dependency_table(analysis.dependencies))
        for warning in analysis.warnings:
            self.print_warning(warning)
        for error in analysis.errors:
            self.console.print(f"[red]✗[/red] {escape(error.file)}: {escape(error.error)}")

    def print_popularity_summary(self, enrichment: PopularityEnrichment, top: int = 15) -> None:
        """Print the most overridden classes of a corpus."""
        table = Table(
            title=f"Most overridden classes ({enrichment.plugin_count} plugins)",
            header_style="bold magenta",
        )
        table.add_column("Plugins", justify="right")
        table.add_column("Class", style="cyan")
        for name, count in list(enrichment.class_popularity.items())[:top]:
            table.add_row(str(count), escape(name))
        self.console.print(table)

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")
