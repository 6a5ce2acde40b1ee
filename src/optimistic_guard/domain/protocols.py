from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Protocol

if TYPE_CHECKING:
    from optimistic_guard.domain.entities import Diagnostic, RewriteResult


class DiagnosticCollectorProtocol(Protocol):
    """Append-only sink for compile-time diagnostics."""

    def add_error_and_continue(
        self, message: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> None:
        ...

    def add_warning(
        self, message: str, line: Optional[int] = None, column: Optional[int] = None
    ) -> None:
        ...

    @property
    def diagnostics(self) -> list["Diagnostic"]:
        ...


class RewriteGatewayProtocol(Protocol):
    """Protocol for rewriting guarded functions in Python source."""

    def rewrite_source(self, code: str, path: Optional[str] = None) -> "RewriteResult":
        """Rewrite a module's source text. Never raises on malformed input."""
        ...

    def rewrite_file(self, path: Path, write: bool = True) -> "RewriteResult":
        """Rewrite a file, writing it back only when write is True and the code changed."""
        ...


class FileSystemProtocol(Protocol):
    """Protocol for locating source files."""

    def iter_python_files(self, paths: Iterable[Path]) -> list[Path]:
        ...
