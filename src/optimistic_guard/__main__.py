"""Package entry point - composition root. Wire dependencies and run the CLI app."""

import sys

from optimistic_guard.domain.errors import ConfigurationError
from optimistic_guard.infrastructure.di.container import GuardContainer
from optimistic_guard.interface.cli import EXIT_ERROR, CLIDependencies, create_app
from optimistic_guard.interface.reporters import TerminalRewriteReporter


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    try:
        container = GuardContainer()
    except ConfigurationError as exc:
        TerminalRewriteReporter().report_error(str(exc))
        sys.exit(EXIT_ERROR)

    deps = CLIDependencies(
        config=container.get_config(),
        rewrite_gateway=container.get_rewrite_gateway(),
        filesystem=container.get_filesystem_gateway(),
        reporter=container.get_reporter(),
    )
    app = create_app(deps)
    app()


if __name__ == "__main__":
    main()
