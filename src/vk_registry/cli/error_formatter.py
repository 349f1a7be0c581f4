"""Issue and warning formatting with Rich."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from vk_registry.validation.errors import ValidationSeverity

if TYPE_CHECKING:
    from vk_registry.models.resolved import MergeWarning
    from vk_registry.validation.errors import (
        ValidationIssue,
        ValidationLocation,
        ValidationResult,
    )

_SEVERITY_COLORS = {
    ValidationSeverity.ERROR: "red",
    ValidationSeverity.WARNING: "yellow",
    ValidationSeverity.INFO: "blue",
}


def issue_section(issue: ValidationIssue) -> str:
    """Top-level section of an issue path (``types``, ``commands``, ...)."""
    if issue.location is None:
        return "general"
    path = issue.location.path
    if path.startswith("registry/"):
        path = path[len("registry/") :]
    return path.split("/")[0].split("[")[0] or "general"


class ErrorFormatter:
    """Formats validation issues for terminal display."""

    def __init__(
        self,
        console: Console | None = None,
        show_context: bool = True,
        show_info: bool = False,
        max_context_lines: int = 3,
    ) -> None:
        """Initialize formatter.

        Args:
        ----
            console: Rich Console for output.
            show_context: Whether to show source context.
            show_info: Whether to print info-level issues.
            max_context_lines: Max lines of context to show.

        """
        self.console = console or Console(stderr=True)
        self.show_context = show_context
        self.show_info = show_info
        self.max_context_lines = max_context_lines

    def format_validation_result(
        self,
        result: ValidationResult,
        source_path: Path | None = None,
        source_content: str | None = None,
    ) -> None:
        """Format and print validation result.

        Args:
        ----
            result: The validation result to format.
            source_path: Path to source file (for display).
            source_content: Source content for context snippets.

        """
        infos = result.infos if self.show_info else []
        if result.is_valid and not result.warnings:
            for issue in infos:
                self._print_issue(issue, source_content)
            self._print_success("Validation passed")
            return

        error_count = len(result.errors)
        warning_count = len(result.warnings)

        self.console.print(self._build_summary(error_count, warning_count, source_path))
        self.console.print()

        for issue in [*result.errors, *result.warnings, *infos]:
            self._print_issue(issue, source_content)

        self.console.print()
        if error_count > 0:
            self.console.print(f"[red bold]✗ {error_count} error(s)[/red bold]", end="")
        if warning_count > 0:
            if error_count > 0:
                self.console.print(", ", end="")
            self.console.print(f"[yellow]{warning_count} warning(s)[/yellow]", end="")
        self.console.print()

    def format_merge_warnings(self, warnings: Iterable[MergeWarning]) -> None:
        """Print the warnings carried by a resolved registry."""
        for warning in warnings:
            color = "blue" if warning.informational else "yellow"
            self.console.print(
                f"[{color}]{escape(f'[{warning.code}]')}[/{color}] {escape(warning.message)} "
                f"[dim]({escape(warning.source)})[/dim]"
            )

    def _build_summary(
        self,
        errors: int,
        warnings: int,
        source_path: Path | None,
    ) -> Panel:
        """Build summary panel."""
        title = "Validation Failed" if errors > 0 else "Validation Warnings"
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

    def _print_issue(self, issue: ValidationIssue, source_content: str | None) -> None:
        color = _SEVERITY_COLORS[issue.severity]
        severity = issue.severity.value.upper()
        self.console.print(
            f"[{color} bold]{severity}[/{color} bold] "
            f"[{color}]{escape(f'[{issue.code}]')}[/{color}] "
            f"{escape(issue.message)}",
            highlight=False,
        )

        if issue.location:
            self.console.print(f"  [dim]at {escape(str(issue.location))}[/dim]", highlight=False)

        if self.show_context and source_content and issue.location:
            context = self._get_source_context(source_content, issue.location)
            if context:
                self.console.print(context)

        if issue.suggestion:
            self.console.print(f"  [green]💡 {escape(issue.suggestion)}[/green]")

        self.console.print()

    def _get_source_context(
        self,
        source: str,
        location: ValidationLocation,
    ) -> Syntax | None:
        """Get source context around the issue location."""
        if location.line is None:
            return None

        lines = source.splitlines()
        line_no = location.line - 1

        if line_no < 0 or line_no >= len(lines):
            return None

        start = max(0, line_no - self.max_context_lines)
        end = min(len(lines), line_no + self.max_context_lines + 1)

        return Syntax(
            "\n".join(lines[start:end]),
            "xml",
            line_numbers=True,
            start_line=start + 1,
            highlight_lines={location.line},
            theme="monokai",
        )

    def _print_success(self, message: str) -> None:
        self.console.print(f"[green]✓ {message}[/green]")


class ErrorTree:
    """Display issues as a tree grouped by registry section."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize error tree formatter.

        Args:
        ----
            console: Rich Console for output.

        """
        self.console = console or Console(stderr=True)

    def print_result(self, result: ValidationResult) -> None:
        """Print validation result as tree."""
        tree = Tree("[bold]Validation Issues[/bold]")

        by_section: dict[str, list[ValidationIssue]] = {}
        for issue in result.issues:
            by_section.setdefault(issue_section(issue), []).append(issue)

        for section, issues in sorted(by_section.items()):
            section_node = tree.add(f"[cyan]{section}[/cyan] ({len(issues)} issues)")

            for issue in issues:
                color = _SEVERITY_COLORS[issue.severity]
                section_node.add(f"[{color}]{issue.code}[/{color}] {escape(issue.message)}")

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

    def print_result(self, result: ValidationResult) -> None:
        """Print validation result as table."""
        table = Table(title="Validation Issues")

        table.add_column("Code", style="cyan", width=6)
        table.add_column("Severity", width=8)
        table.add_column("Location", style="dim")
        table.add_column("Message")

        for issue in result.issues:
            color = _SEVERITY_COLORS[issue.severity]
            severity = f"[{color}]{issue.severity.value.upper()}[/{color}]"
            location = str(issue.location) if issue.location else "-"
            table.add_row(issue.code, severity, escape(location), escape(issue.message))

        self.console.print(table)
