"""Run rewritten controller actions and check what the recovery body does."""

from typing import Any, Optional

import pytest

from optimistic_guard import rewrite_source
from optimistic_guard.domain.constants import (
    DEFAULT_FLASH_MESSAGE_CODE,
    DEFAULT_REDIRECT_ACTION,
    DEFAULT_REDIRECT_PARAMS,
)
from optimistic_guard.runtime import filter_params

CONTROLLER_TEMPLATE = '''
from optimistic_guard import optimistic_locking
from optimistic_guard.runtime import OptimisticLockingFailure


class Controller:
    def __init__(self, params):
        self.params = params
        self.flash = {{}}
        self.redirect_args = None

    def redirect(self, args):
        self.redirect_args = args

    def message(self, args):
        return args["code"]

    @optimistic_locking{decorator_args}
    def action(self):
        {body}
'''

THROWS_FAILURE = 'raise OptimisticLockingFailure("failure")'


def run_action(
    decorator_args: str = "",
    body: str = THROWS_FAILURE,
    params: Optional[dict[str, Any]] = None,
) -> Any:
    """Rewrite the controller source, execute it and call action() once."""
    source = CONTROLLER_TEMPLATE.format(decorator_args=decorator_args, body=body)
    result = rewrite_source(source, path="controller.py")
    assert result.diagnostics == []
    assert result.rewritten_functions == ["Controller.action"]

    namespace: dict[str, Any] = {}
    exec(compile(result.new_code, "controller.py", "exec"), namespace)
    controller = namespace["Controller"](params if params is not None else {"id": 1, "other": 2})
    controller.action()
    return controller


class TestGuardedActions:
    """Behaviour of rewritten actions."""

    def test_defaults_when_failure_is_raised(self) -> None:
        controller = run_action()

        assert controller.flash["message"] == DEFAULT_FLASH_MESSAGE_CODE
        assert controller.redirect_args["action"] == DEFAULT_REDIRECT_ACTION
        assert controller.redirect_args["params"] == filter_params(
            controller.params, [DEFAULT_REDIRECT_PARAMS]
        )
        assert controller.redirect_args["params"] == {"id": 1}

    def test_bare_call_uses_defaults(self) -> None:
        controller = run_action(decorator_args="()")

        assert controller.flash["message"] == DEFAULT_FLASH_MESSAGE_CODE
        assert controller.redirect_args["action"] == DEFAULT_REDIRECT_ACTION

    def test_custom_redirect(self) -> None:
        controller = run_action(decorator_args='(redirect="otherAction")')

        assert controller.flash["message"] == DEFAULT_FLASH_MESSAGE_CODE
        assert controller.redirect_args["action"] == "otherAction"
        assert controller.redirect_args["params"] == {"id": 1}

    def test_custom_params_include_missing_names_as_none(self) -> None:
        params = {"id": 1, "other": 2, "param1": 3, "param2": 4}
        controller = run_action(
            decorator_args='(params="param1, param2, notExistingParam")', params=params
        )

        assert controller.flash["message"] == DEFAULT_FLASH_MESSAGE_CODE
        assert controller.redirect_args["action"] == DEFAULT_REDIRECT_ACTION
        assert controller.redirect_args["params"] == {
            "param1": 3,
            "param2": 4,
            "notExistingParam": None,
        }
        assert list(controller.redirect_args["params"]) == ["param1", "param2", "notExistingParam"]

    def test_custom_message_code(self) -> None:
        controller = run_action(decorator_args='(message_code="otherMessage")')

        assert controller.flash["message"] == "otherMessage"
        assert controller.redirect_args["action"] == DEFAULT_REDIRECT_ACTION
        assert controller.redirect_args["params"] == {"id": 1}

    def test_no_failure_leaves_action_untouched(self) -> None:
        controller = run_action(body='self.flash["message"] = "Success"', params={"id": 1})

        assert controller.flash["message"] == "Success"
        assert controller.redirect_args is None

    def test_other_exceptions_propagate(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            run_action(body='raise ValueError("boom")')

    def test_failing_redirect_propagates_from_recovery(self) -> None:
        source = CONTROLLER_TEMPLATE.format(decorator_args="", body=THROWS_FAILURE).replace(
            "self.redirect_args = args", 'raise RuntimeError("redirect failed")'
        )
        result = rewrite_source(source)
        namespace: dict[str, Any] = {}
        exec(compile(result.new_code, "controller.py", "exec"), namespace)
        controller = namespace["Controller"]({"id": 1})

        with pytest.raises(RuntimeError, match="redirect failed"):
            controller.action()
        assert controller.flash["message"] == DEFAULT_FLASH_MESSAGE_CODE
