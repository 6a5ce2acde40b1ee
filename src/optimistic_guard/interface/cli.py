"""CLI entry points for optimistic-guard - Thin Controller using Typer."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import typer

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.domain.protocols import FileSystemProtocol, RewriteGatewayProtocol
from optimistic_guard.interface.reporters import RewriteReporter
from optimistic_guard.use_cases.rewrite_sources import RewriteSourcesUseCase

EXIT_OK: int = 0
EXIT_WOULD_CHANGE: int = 1
EXIT_ERROR: int = 2


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    config: GuardConfig
    rewrite_gateway: RewriteGatewayProtocol
    filesystem: FileSystemProtocol
    reporter: RewriteReporter


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="optimistic-guard",
            help="Rewrite @optimistic_locking controller actions into guarded try/except blocks.",
            add_completion=False,
        )

        @app.callback()
        def main(
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each rewritten function."),
        ) -> None:
            logging.basicConfig(
                level=logging.DEBUG if verbose else logging.WARNING,
                format="%(levelname)s %(name)s: %(message)s",
            )

        @app.command()
        def rewrite(
            paths: List[Path] = typer.Argument(..., help="Files or directories to rewrite"),  # noqa: B008
            check: bool = typer.Option(False, "--check", help="Write nothing; exit 1 if any file would change."),
            diff: bool = typer.Option(False, "--diff", help="Write nothing; print unified diffs."),
        ) -> None:
            """Rewrite guarded functions in place."""
            write = not (check or diff)
            use_case = RewriteSourcesUseCase(
                rewrite_gateway=deps.rewrite_gateway,
                filesystem=deps.filesystem,
            )
            report = use_case.execute(paths, write=write)
            if diff:
                for result in report.changed_results:
                    deps.reporter.report_diff(result)
            deps.reporter.report(report, check=not write)

            if report.has_errors():
                raise typer.Exit(code=EXIT_ERROR)
            if check and report.changed_results:
                raise typer.Exit(code=EXIT_WOULD_CHANGE)

        @app.command("show-config")
        def show_config() -> None:
            """Print the effective [tool.optimistic-guard] settings."""
            deps.reporter.report_config(deps.config)

        return app


def create_app(deps: CLIDependencies) -> typer.Typer:
    return CLIAppFactory.create_app(deps)
