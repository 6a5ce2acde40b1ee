"""
Names referenced by rewritten controller code.

A function decorated with @optimistic_locking is rewritten into::

    try:
        <original body>
    except OptimisticLockingFailure:
        self.flash["message"] = self.message({"code": "optimistic.locking.failure"})
        self.redirect({"action": "edit", "params": filter_params(self.params, ["id"])})

The receiver (``self``) must satisfy ControllerContext.
"""

from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional, Protocol, TypeVar, Union, overload

from optimistic_guard.domain.constants import (
    DEFAULT_FLASH_MESSAGE_CODE,
    DEFAULT_REDIRECT_ACTION,
    DEFAULT_REDIRECT_PARAMS,
)
from optimistic_guard.domain.entities import AnnotationSpec

F = TypeVar("F", bound=Callable[..., Any])

SPEC_ATTRIBUTE: str = "__optimistic_locking__"


class OptimisticLockingFailure(Exception):
    """Raised when a persisted record's version no longer matches the one being saved."""


class ControllerContext(Protocol):
    """Capabilities the generated recovery body calls on its receiver."""

    flash: MutableMapping[str, Any]
    params: Mapping[str, Any]

    def message(self, args: Mapping[str, Any]) -> Any:
        """Resolve a message from {"code": ...}."""
        ...

    def redirect(self, args: Mapping[str, Any]) -> Any:
        """Hand control to {"action": ..., "params": ...}."""
        ...


def filter_params(params: Mapping[str, Any], names: Iterable[str]) -> dict[str, Any]:
    """Return one entry per requested name, in request order; missing names map to None."""
    return {name: params.get(name) for name in names}


@overload
def optimistic_locking(func: F, /) -> F: ...


@overload
def optimistic_locking(
    func: None = None,
    /,
    *,
    redirect: str = ...,
    params: str = ...,
    message_code: str = ...,
) -> Callable[[F], F]: ...


def optimistic_locking(
    func: Optional[F] = None,
    /,
    *,
    redirect: str = DEFAULT_REDIRECT_ACTION,
    params: str = DEFAULT_REDIRECT_PARAMS,
    message_code: str = DEFAULT_FLASH_MESSAGE_CODE,
) -> Union[F, Callable[[F], F]]:
    """
    Mark a controller action for the optimistic-locking rewrite.

    The marker has no run-time effect beyond recording its settings on the
    function; the try/except is produced by ``optimistic-guard rewrite``.
    Members are keyword-only.
    """
    if func is not None and not callable(func):
        raise TypeError(
            "optimistic_locking members are keyword-only (redirect=, params=, message_code=); "
            f"got positional {func!r}"
        )
    spec = AnnotationSpec(
        redirect_action=redirect or DEFAULT_REDIRECT_ACTION,
        message_code=message_code or DEFAULT_FLASH_MESSAGE_CODE,
        param_names_raw=params or DEFAULT_REDIRECT_PARAMS,
    )

    def mark(target: F) -> F:
        setattr(target, SPEC_ATTRIBUTE, spec)
        return target

    if func is not None:
        return mark(func)
    return mark
