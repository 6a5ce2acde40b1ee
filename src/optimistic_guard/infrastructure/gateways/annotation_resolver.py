"""Read @optimistic_locking members from a LibCST decorator."""

from collections.abc import Mapping, Sequence
from typing import Optional

import libcst as cst

from optimistic_guard.domain.constants import (
    MEMBER_DEFAULTS,
    MEMBER_MESSAGE_CODE,
    MEMBER_PARAMS,
    MEMBER_REDIRECT,
)
from optimistic_guard.domain.entities import AnnotationSpec

_EMPTY_MODULE = cst.Module(body=[])


def _dotted_name(expr: cst.BaseExpression) -> Optional[str]:
    if isinstance(expr, cst.Name):
        return expr.value
    if isinstance(expr, cst.Attribute):
        prefix = _dotted_name(expr.value)
        return f"{prefix}.{expr.attr.value}" if prefix else None
    return None


def decorator_name(decorator: cst.Decorator) -> Optional[str]:
    """Return the dotted name of a decorator: '@a.b.guard(...)' -> 'a.b.guard'."""
    target = decorator.decorator
    if isinstance(target, cst.Call):
        target = target.func
    return _dotted_name(target)


def call_arguments(decorator: cst.Decorator) -> Sequence[cst.Arg]:
    """Arguments of a called decorator; a bare decorator has none."""
    if isinstance(decorator.decorator, cst.Call):
        return decorator.decorator.args
    return ()


def literal_text(expr: cst.BaseExpression) -> str:
    """
    Text of a member value.

    Plain string literals give their evaluated value; anything else
    (names, f-strings, calls) gives its source text.
    """
    if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        value = expr.evaluated_value
        if isinstance(value, str):
            return value
    return _EMPTY_MODULE.code_for_node(expr)


class AnnotationParameterResolver:
    """Resolve the effective member values of one decorator usage."""

    def __init__(self, member_defaults: Optional[Mapping[str, str]] = None) -> None:
        self.member_defaults = dict(member_defaults or MEMBER_DEFAULTS)

    def lookup_member(self, decorator: cst.Decorator, member_name: str) -> Optional[cst.BaseExpression]:
        for arg in call_arguments(decorator):
            if arg.keyword is not None and arg.keyword.value == member_name:
                return arg.value
        return None

    def resolve_member(self, decorator: cst.Decorator, member_name: str, default: str) -> str:
        """Declared value of member_name, or default when it is absent or empty."""
        member = self.lookup_member(decorator, member_name)
        if member is None:
            return default
        return literal_text(member) or default

    def resolve_spec(self, decorator: cst.Decorator) -> AnnotationSpec:
        redirect, message_code, params = (
            self.resolve_member(decorator, member, self.member_defaults[member])
            for member in (MEMBER_REDIRECT, MEMBER_MESSAGE_CODE, MEMBER_PARAMS)
        )
        return AnnotationSpec(
            redirect_action=redirect,
            message_code=message_code,
            param_names_raw=params,
        )
