"""Issue and result formatting with Rich."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

if TYPE_CHECKING:
    from schema_to_ir.ir.service import ServiceDefinition
    from schema_to_ir.validation.errors import ConversionIssue, ConversionReport

_SEVERITY_COLORS = {"error": "red", "warning": "yellow", "info": "blue"}


class ErrorFormatter:
    """Formats conversion issues for terminal display."""

    def __init__(self, console: Console | None = None, show_info: bool = False) -> None:
        """Initialize formatter.

        Args:
        ----
            console: Rich Console for output.
            show_info: Whether to print info-level issues too.

        """
        self.console = console or Console(stderr=True)
        self.show_info = show_info

    def format_report(self, report: ConversionReport, source_path: Path | None = None) -> None:
        """Format and print a conversion report.

        Args:
        ----
            report: The report to format.
            source_path: Path to the source file (for display).

        """
        if report.is_valid and not report.warnings:
            self._print_success("No issues")
            return

        error_count = len(report.errors)
        warning_count = len(report.warnings)

        self.console.print(self._build_summary(error_count, warning_count, source_path))
        self.console.print()

        for issue in report.errors:
            self._print_issue(issue)
        for issue in report.warnings:
            self._print_issue(issue)
        if self.show_info:
            for issue in report.infos:
                self._print_issue(issue)

        if error_count > 0:
            self.console.print(f"[red bold]✗ {error_count} error(s)[/red bold]", end="")
        if warning_count > 0:
            if error_count > 0:
                self.console.print(", ", end="")
            self.console.print(f"[yellow]{warning_count} warning(s)[/yellow]", end="")
        self.console.print()

    def _build_summary(
        self,
        errors: int,
        warnings: int,
        source_path: Path | None,
    ) -> Panel:
        title = "Conversion Failed" if errors > 0 else "Conversion Warnings"
        style = "red" if errors > 0 else "yellow"

        content = Text()
        if source_path:
            content.append(f"File: {source_path}\n", style="dim")

        if errors > 0:
            content.append(f"Errors: {errors}", style="red bold")
        if warnings > 0:
            if errors > 0:
                content.append("  ")
            content.append(f"Warnings: {warnings}", style="yellow")

        return Panel(content, title=title, border_style=style)

    def _print_issue(self, issue: ConversionIssue) -> None:
        color = _SEVERITY_COLORS[issue.severity.value]
        severity = issue.severity.value.upper()
        self.console.print(
            f"[{color} bold]{severity}[/{color} bold] "
            f"[{color}]\\[{issue.code}][/{color}] "
            f"{issue.message}"
        )
        if issue.location:
            self.console.print(f"  [dim]at {issue.location}[/dim]")
        if issue.suggestion:
            self.console.print(f"  [green]💡 {issue.suggestion}[/green]")
        self.console.print()

    def _print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {message}[/green]")


class ErrorTree:
    """Display issues as a tree grouped by resource."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize error tree formatter.

        Args:
        ----
            console: Rich Console for output.

        """
        self.console = console or Console(stderr=True)

    def print_report(self, report: ConversionReport) -> None:
        """Print a report as a tree."""
        tree = Tree("[bold]Conversion Issues[/bold]")

        by_section: dict[str, list[ConversionIssue]] = {}
        for issue in report.issues:
            section = issue.location.path.split(".")[0] if issue.location else "general"
            by_section.setdefault(section, []).append(issue)

        for section, issues in sorted(by_section.items()):
            section_node = tree.add(f"[cyan]{section}[/cyan] ({len(issues)} issues)")
            for issue in issues:
                color = _SEVERITY_COLORS[issue.severity.value]
                section_node.add(f"[{color}]{issue.code}[/{color}] {issue.message}")

        self.console.print(tree)


class ErrorTable:
    """Display issues as a table."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize error table formatter.

        Args:
        ----
            console: Rich Console for output.

        """
        self.console = console or Console(stderr=True)

    def print_report(self, report: ConversionReport) -> None:
        """Print a report as a table."""
        table = Table(title="Conversion Issues")

        table.add_column("Code", style="cyan", width=6)
        table.add_column("Severity", width=8)
        table.add_column("Location", style="dim")
        table.add_column("Message")

        for issue in report.issues:
            color = _SEVERITY_COLORS[issue.severity.value]
            severity = f"[{color}]{issue.severity.value.upper()}[/{color}]"
            location = str(issue.location) if issue.location else "-"
            table.add_row(issue.code, severity, location, issue.message)

        self.console.print(table)


class ResourceTable:
    """Summarize the resources of a service, one row each."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize resource table formatter.

        Args:
        ----
            console: Rich Console for output.

        """
        self.console = console or Console()

    def print_service(self, service: ServiceDefinition) -> None:
        """Print a table of resources with their C/R/U/D markers."""
        table = Table(
            title=f"{service.name} {service.sdk_version} ({service.provider.value})",
            show_header=True,
        )
        table.add_column("Resource", style="cyan")
        table.add_column("Ops", style="green")
        table.add_column("Fields", justify="right")
        table.add_column("Blocks", justify="right")
        table.add_column("Outputs", justify="right")
        table.add_column("ID", style="dim")

        for resource in service.resources:
            table.add_row(
                resource.name,
                resource.operations.markers(),
                str(len(resource.fields)),
                str(len(resource.blocks)),
                str(len(resource.outputs)),
                resource.id_field or "-",
            )

        self.console.print(table)
        if service.data_sources:
            names = ", ".join(d.name for d in service.data_sources)
            self.console.print(f"[dim]Data sources: {names}[/dim]")
