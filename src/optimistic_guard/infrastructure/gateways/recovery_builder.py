"""LibCST node builders for the recovery body and the try/except wrapper."""

from collections.abc import Sequence

import libcst as cst

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.domain.constants import (
    MESSAGE_CODE_KEY,
    REDIRECT_ACTION_KEY,
    REDIRECT_PARAMS_KEY,
)
from optimistic_guard.domain.entities import GuardedBlock


def string_literal(value: str) -> cst.SimpleString:
    """Double-quoted literal when no escaping is needed, repr() otherwise."""
    if value.isprintable() and '"' not in value and "\\" not in value:
        return cst.SimpleString(f'"{value}"')
    return cst.SimpleString(repr(value))


def _map(entries: Sequence[tuple[str, cst.BaseExpression]]) -> cst.Dict:
    return cst.Dict([cst.DictElement(key=string_literal(k), value=v) for k, v in entries])


class RecoveryBlockBuilder:
    """
    Build the two statements run when the failure type is caught.

        <receiver>.<flash>["<key>"] = <receiver>.<message>({"code": <message_code>})
        <receiver>.<redirect>({"action": <action>, "params": <filter>(<receiver>.<params>, [...])})

    Call targets are emitted by name only and resolved when the rewritten code runs.
    """

    def __init__(self, config: GuardConfig) -> None:
        self.config = config

    def _receiver_attr(self, attr: str) -> cst.Attribute:
        return cst.Attribute(value=cst.Name(self.config.receiver), attr=cst.Name(attr))

    def build_message_assignment(self, message_code: str) -> cst.SimpleStatementLine:
        flash_location = cst.Subscript(
            value=self._receiver_attr(self.config.flash_attribute),
            slice=[cst.SubscriptElement(slice=cst.Index(value=string_literal(self.config.flash_key)))],
        )
        message_call = cst.Call(
            func=self._receiver_attr(self.config.message_method),
            args=[cst.Arg(value=_map([(MESSAGE_CODE_KEY, string_literal(message_code))]))],
        )
        return cst.SimpleStatementLine(
            body=[cst.Assign(targets=[cst.AssignTarget(target=flash_location)], value=message_call)]
        )

    def build_params_filter(self, param_names: Sequence[str]) -> cst.Call:
        names = cst.List([cst.Element(value=string_literal(name)) for name in param_names])
        return cst.Call(
            func=cst.Name(self.config.filter_function_name),
            args=[
                cst.Arg(value=self._receiver_attr(self.config.params_attribute)),
                cst.Arg(value=names),
            ],
        )

    def build_redirect_call(self, redirect_action: str, param_names: Sequence[str]) -> cst.SimpleStatementLine:
        redirect_args = _map([
            (REDIRECT_ACTION_KEY, string_literal(redirect_action)),
            (REDIRECT_PARAMS_KEY, self.build_params_filter(param_names)),
        ])
        redirect_call = cst.Call(
            func=self._receiver_attr(self.config.redirect_method),
            args=[cst.Arg(value=redirect_args)],
        )
        return cst.SimpleStatementLine(body=[cst.Expr(value=redirect_call)])

    def build(
        self, redirect_action: str, message_code: str, param_names: Sequence[str]
    ) -> list[cst.BaseStatement]:
        return [
            self.build_message_assignment(message_code),
            self.build_redirect_call(redirect_action, param_names),
        ]


class BlockWrapper:
    """Combine original statements and a recovery body into one try/except."""

    def __init__(self, config: GuardConfig) -> None:
        self.config = config

    def guarded_block(
        self,
        original_statements: Sequence[cst.BaseStatement],
        recovery_statements: Sequence[cst.BaseStatement],
    ) -> GuardedBlock:
        return GuardedBlock(
            body=tuple(original_statements),
            failure_type=self.config.failure_type_name,
            recovery=tuple(recovery_statements),
        )

    def wrap(
        self,
        original_statements: Sequence[cst.BaseStatement],
        recovery_statements: Sequence[cst.BaseStatement],
        footer: Sequence[cst.EmptyLine] = (),
    ) -> cst.Try:
        block = self.guarded_block(original_statements, recovery_statements)
        return cst.Try(
            body=cst.IndentedBlock(body=list(block.body), footer=list(footer)),
            handlers=[
                cst.ExceptHandler(
                    type=cst.Name(block.failure_type),
                    body=cst.IndentedBlock(body=list(block.recovery)),
                )
            ],
        )
