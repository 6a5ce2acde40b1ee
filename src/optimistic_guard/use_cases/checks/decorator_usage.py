"""Optimistic locking decorator usage checks (W9701-W9703)."""

import logging
from typing import TYPE_CHECKING, Optional

import astroid  # type: ignore[import-untyped]
from pylint.checkers import BaseChecker

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.domain.constants import KNOWN_MEMBERS
from optimistic_guard.domain.errors import ConfigurationError
from optimistic_guard.infrastructure.config_file_loader import ConfigFileLoader

if TYPE_CHECKING:
    from pylint.lint import PyLinter

logger = logging.getLogger(__name__)


class OptimisticLockingChecker(BaseChecker):
    """W9701-W9703: @optimistic_locking usages the rewrite cannot honour as written."""

    name: str = "optimistic-locking"
    msgs = {
        "W9701": (
            "@%s must decorate a function with an indented body, not %s",
            "optimistic-locking-misplaced",
            "The rewrite only wraps function bodies; other targets are reported and left untouched.",
        ),
        "W9702": (
            "Unknown @%s member %s. Supported members: message_code, params, redirect",
            "optimistic-locking-unknown-member",
            "Positional arguments and unknown keywords are ignored by the rewrite.",
        ),
        "W9703": (
            "@%s member '%s' is not a string literal; its source text %r is used verbatim",
            "optimistic-locking-non-literal-member",
            "Member values are read at rewrite time, so only string literals keep their meaning.",
        ),
    }

    def __init__(self, linter: "PyLinter", config: Optional[GuardConfig] = None) -> None:
        super().__init__(linter)
        if config is None:
            try:
                config = ConfigFileLoader.load_config_from_fs()
            except ConfigurationError as exc:
                logger.warning("Configuration Warning: %s. Using defaults.", exc)
                config = GuardConfig()
        self.config = config

    def _decorator_name(self, decorator: astroid.nodes.NodeNG) -> Optional[str]:
        """Dotted name of a decorator expression: '@a.b.guard(...)' -> 'a.b.guard'."""
        if isinstance(decorator, astroid.nodes.Call):
            decorator = decorator.func
        if isinstance(decorator, astroid.nodes.Name):
            return decorator.name
        if isinstance(decorator, astroid.nodes.Attribute):
            prefix = self._decorator_name(decorator.expr)
            return f"{prefix}.{decorator.attrname}" if prefix else None
        return None

    def _guards(self, node: astroid.nodes.NodeNG) -> list[astroid.nodes.NodeNG]:
        if not node.decorators:
            return []
        guards = []
        for decorator in node.decorators.nodes:
            name = self._decorator_name(decorator)
            if name is not None and self.config.matches_decorator(name):
                guards.append(decorator)
        return guards

    @staticmethod
    def _has_inline_body(node: astroid.nodes.FunctionDef) -> bool:
        """True for 'def f(self): body', including after a signature spread over several lines."""
        first = node.body[0]
        stream = node.root().stream()
        if stream is None:
            return first.lineno == node.fromlineno
        with stream:
            lines = stream.read().splitlines()
        # col_offset counts UTF-8 bytes, so compare on the raw line
        line = lines[first.lineno - 1] if first.lineno <= len(lines) else b""
        return bool(line[: first.col_offset].strip())

    def _check_members(self, decorator: astroid.nodes.NodeNG) -> None:
        if not isinstance(decorator, astroid.nodes.Call):
            return
        name = self._decorator_name(decorator)
        for arg in decorator.args:
            self.add_message(
                "optimistic-locking-unknown-member", node=arg, args=(name, f"{arg.as_string()} (positional)")
            )
        for keyword in decorator.keywords or []:
            if keyword.arg not in KNOWN_MEMBERS:
                label = f"'{keyword.arg}'" if keyword.arg else f"'**{keyword.value.as_string()}'"
                self.add_message("optimistic-locking-unknown-member", node=keyword, args=(name, label))
                continue
            value = keyword.value
            if not (isinstance(value, astroid.nodes.Const) and isinstance(value.value, str)):
                self.add_message(
                    "optimistic-locking-non-literal-member",
                    node=keyword,
                    args=(name, keyword.arg, value.as_string()),
                )

    def visit_functiondef(self, node: astroid.nodes.FunctionDef) -> None:
        guards = self._guards(node)
        if guards and node.body and self._has_inline_body(node):
            self.add_message(
                "optimistic-locking-misplaced",
                node=guards[0],
                args=(self._decorator_name(guards[0]), f"one-line function '{node.name}'"),
            )
        for decorator in guards:
            self._check_members(decorator)

    visit_asyncfunctiondef = visit_functiondef

    def visit_classdef(self, node: astroid.nodes.ClassDef) -> None:
        for decorator in self._guards(node):
            self.add_message(
                "optimistic-locking-misplaced",
                node=decorator,
                args=(self._decorator_name(decorator), f"class '{node.name}'"),
            )
            self._check_members(decorator)
