"""Interface for rewrite reporting."""

import difflib
from typing import TYPE_CHECKING, Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from optimistic_guard.domain.config import GuardConfig
    from optimistic_guard.domain.entities import RewriteReport, RewriteResult


class RewriteReporter(Protocol):
    """Protocol for reporting rewrite results."""

    def report(self, report: "RewriteReport", check: bool = False) -> None:
        ...

    def report_diff(self, result: "RewriteResult") -> None:
        ...

    def report_config(self, config: "GuardConfig") -> None:
        ...

    def report_error(self, message: str) -> None:
        ...


class TerminalRewriteReporter:
    """Terminal reporter using rich tables."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def report(self, report: "RewriteReport", check: bool = False) -> None:
        """Print the per-file table and any diagnostics."""
        changed = report.changed_results
        if changed:
            table = Table(title="[OPTIMISTIC-GUARD] Guarded Functions", header_style="bold #007BFF")
            table.add_column("File", style="#00EEFF")
            table.add_column("Functions")
            for result in changed:
                table.add_row(escape(result.path or "<source>"), ", ".join(result.rewritten_functions))
            self.console.print(table)

        diagnostics = report.all_diagnostics()
        if diagnostics:
            table = Table(title="[OPTIMISTIC-GUARD] Diagnostics", header_style="bold #F9A602")
            table.add_column("Severity", style="#C41E3A")
            table.add_column("Location")
            table.add_column("Message")
            for diagnostic in diagnostics:
                row = diagnostic.to_dict()
                table.add_row(str(row["severity"]), escape(str(row["location"])), escape(str(row["message"])))
            self.console.print(table)

        verb = "would be rewritten" if check else "rewritten"
        self.console.print(
            f"{len(changed)} file(s) {verb}, {len(report.results) - len(changed)} unchanged."
        )

    def report_diff(self, result: "RewriteResult") -> None:
        name = result.path or "<source>"
        diff = "".join(
            difflib.unified_diff(
                result.original_code.splitlines(keepends=True),
                result.new_code.splitlines(keepends=True),
                fromfile=name,
                tofile=name,
            )
        )
        if diff:
            self.console.print(Syntax(diff, "diff"))

    def report_config(self, config: "GuardConfig") -> None:
        table = Table(title="[OPTIMISTIC-GUARD] Effective Configuration", header_style="bold #007BFF")
        table.add_column("Key", style="#00EEFF")
        table.add_column("Value")
        for key, value in config.to_dict().items():
            table.add_row(key, escape(repr(value)))
        self.console.print(table)

    def report_error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")
