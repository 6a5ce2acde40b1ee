from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union

from optimistic_guard.domain.constants import (
    DEFAULT_FLASH_MESSAGE_CODE,
    DEFAULT_REDIRECT_ACTION,
    DEFAULT_REDIRECT_PARAMS,
)


@dataclass(frozen=True)
class AnnotationSpec:
    """
    Effective values of one @optimistic_locking usage.

    Each field already has its default applied; the raw params string is
    tokenized separately when the recovery body is built.
    """
    redirect_action: str = DEFAULT_REDIRECT_ACTION
    message_code: str = DEFAULT_FLASH_MESSAGE_CODE
    param_names_raw: Optional[str] = DEFAULT_REDIRECT_PARAMS


@dataclass(frozen=True)
class GuardedBlock:
    """Original statements, the intercepted failure type and the recovery statements."""
    body: Sequence[object]
    failure_type: str
    recovery: Sequence[object]

    def __post_init__(self) -> None:
        if len(self.recovery) != 2:
            raise ValueError(
                f"Recovery body must hold exactly two statements, got {len(self.recovery)}"
            )


class Severity(Enum):
    """Diagnostic severity."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A compile-time message tied to a source position."""
    severity: Severity
    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def location(self) -> str:
        """Render as path:line:column, omitting unknown parts."""
        parts = [self.path or "<source>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def to_dict(self) -> dict[str, Union[str, int, None]]:
        """Convert to dictionary for reporter."""
        return {
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location(),
        }


@dataclass(frozen=True)
class RewriteResult:
    """Outcome of rewriting one module."""
    path: Optional[str]
    original_code: str
    new_code: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    rewritten_functions: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.new_code != self.original_code

    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


@dataclass(frozen=True)
class RewriteReport:
    """Results of one rewrite run across all requested paths."""
    results: list[RewriteResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def changed_results(self) -> list[RewriteResult]:
        return [r for r in self.results if r.changed]

    def all_diagnostics(self) -> list[Diagnostic]:
        collected = list(self.diagnostics)
        for result in self.results:
            collected.extend(result.diagnostics)
        return collected

    def has_errors(self) -> bool:
        return any(d.is_error for d in self.all_diagnostics())
