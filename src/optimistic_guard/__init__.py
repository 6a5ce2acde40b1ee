"""Source rewrite that guards controller actions against optimistic locking failures."""

from typing import TYPE_CHECKING, Optional

from optimistic_guard.runtime import (
    ControllerContext,
    OptimisticLockingFailure,
    filter_params,
    optimistic_locking,
)

if TYPE_CHECKING:
    from optimistic_guard.domain.config import GuardConfig
    from optimistic_guard.domain.entities import RewriteResult

__all__ = [
    "ControllerContext",
    "OptimisticLockingFailure",
    "filter_params",
    "optimistic_locking",
    "rewrite_source",
]


def rewrite_source(code: str, path: Optional[str] = None, config: Optional["GuardConfig"] = None) -> "RewriteResult":
    """Rewrite every @optimistic_locking function in a module's source text."""
    # Rewritten modules import optimistic_guard.runtime; keep LibCST out of that path.
    from optimistic_guard.infrastructure.gateways.libcst_rewrite_gateway import LibCSTRewriteGateway

    return LibCSTRewriteGateway(config).rewrite_source(code, path)
