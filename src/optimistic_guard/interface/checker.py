"""
Pylint plugin entry point.

Enable with ``pylint --load-plugins=optimistic_guard.interface.checker``.
"""

from pylint.lint import PyLinter

from optimistic_guard.use_cases.checks.decorator_usage import OptimisticLockingChecker


def register(linter: PyLinter) -> None:
    """Register checkers."""
    linter.register_checker(OptimisticLockingChecker(linter))
