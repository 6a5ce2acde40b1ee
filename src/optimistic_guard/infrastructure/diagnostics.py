"""Diagnostic collector shared by one module rewrite."""

import logging
from typing import Optional

from optimistic_guard.domain.entities import Diagnostic, Severity

logger = logging.getLogger(__name__)


class DiagnosticCollector:
    """Append-only list of diagnostics for one source file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._diagnostics: list[Diagnostic] = []

    def _add(self, severity: Severity, message: str, line: Optional[int], column: Optional[int]) -> None:
        diagnostic = Diagnostic(severity=severity, message=message, path=self.path, line=line, column=column)
        self._diagnostics.append(diagnostic)
        logger.warning("%s: %s", diagnostic.location(), message)

    def add_error_and_continue(
        self, message: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> None:
        """Record an error; the caller keeps processing the rest of the module."""
        self._add(Severity.ERROR, message, line, column)

    def add_warning(
        self, message: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> None:
        self._add(Severity.WARNING, message, line, column)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)

    def has_errors(self) -> bool:
        return any(d.is_error for d in self._diagnostics)
