"""Unit tests for RecoveryBlockBuilder and BlockWrapper."""

import libcst as cst
import pytest

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.infrastructure.gateways.recovery_builder import (
    BlockWrapper,
    RecoveryBlockBuilder,
    string_literal,
)
from tests.cst_test_utils import render


class TestStringLiteral:
    def test_plain_value_is_double_quoted(self) -> None:
        assert string_literal("edit").value == '"edit"'

    @pytest.mark.parametrize("value", ['say "hi"', "back\\slash", "line\nbreak"])
    def test_values_needing_escapes_use_repr(self, value: str) -> None:
        literal = string_literal(value)
        assert literal.evaluated_value == value


class TestRecoveryBlockBuilder:
    """The two recovery statements, message first then redirect."""

    def test_builds_message_then_redirect(self, config: GuardConfig) -> None:
        statements = RecoveryBlockBuilder(config).build("edit", "optimistic.locking.failure", ["id"])

        assert len(statements) == 2
        assert render(statements) == (
            'self.flash["message"] = self.message({"code": "optimistic.locking.failure"})\n'
            'self.redirect({"action": "edit", "params": filter_params(self.params, ["id"])})\n'
        )

    def test_param_names_keep_order_and_duplicates(self, config: GuardConfig) -> None:
        statements = RecoveryBlockBuilder(config).build("show", "m", ["b", "a", "b"])
        assert 'filter_params(self.params, ["b", "a", "b"])' in render(statements)

    def test_no_param_names_filters_to_nothing(self, config: GuardConfig) -> None:
        statements = RecoveryBlockBuilder(config).build("show", "m", [])
        assert "filter_params(self.params, [])" in render(statements)

    def test_call_targets_follow_config(self) -> None:
        config = GuardConfig(
            receiver="ctx",
            flash_attribute="session",
            flash_key="notice",
            message_method="lookup_message",
            redirect_method="redirect_to",
            params_attribute="query",
            filter_function="myapp.web.sub_map",
        )
        code = render(RecoveryBlockBuilder(config).build("list", "stale", ["pk"]))
        assert code == (
            'ctx.session["notice"] = ctx.lookup_message({"code": "stale"})\n'
            'ctx.redirect_to({"action": "list", "params": sub_map(ctx.query, ["pk"])})\n'
        )


class TestBlockWrapper:
    """try/except construction around the original statements."""

    def setup_method(self) -> None:
        self.config = GuardConfig()
        self.original = list(cst.parse_module("a = 1\nsave(a)\n").body)
        self.recovery = RecoveryBlockBuilder(self.config).build("edit", "m", ["id"])

    def test_wraps_original_statements_unchanged(self) -> None:
        try_node = BlockWrapper(self.config).wrap(self.original, self.recovery)

        assert list(try_node.body.body) == self.original
        assert all(a is b for a, b in zip(try_node.body.body, self.original))

    def test_single_handler_without_else_or_finally(self) -> None:
        try_node = BlockWrapper(self.config).wrap(self.original, self.recovery)

        assert len(try_node.handlers) == 1
        handler = try_node.handlers[0]
        assert isinstance(handler.type, cst.Name)
        assert handler.type.value == "OptimisticLockingFailure"
        assert handler.name is None
        assert list(handler.body.body) == self.recovery
        assert try_node.orelse is None
        assert try_node.finalbody is None

    def test_rendered_shape(self) -> None:
        try_node = BlockWrapper(self.config).wrap(self.original, self.recovery)
        code = render([try_node])
        assert code.startswith("try:\n    a = 1\n    save(a)\nexcept OptimisticLockingFailure:\n")

    def test_guarded_block_rejects_wrong_recovery_length(self) -> None:
        with pytest.raises(ValueError):
            BlockWrapper(self.config).wrap(self.original, self.recovery[:1])
