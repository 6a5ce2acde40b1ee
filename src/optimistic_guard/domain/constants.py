"""
Optimistic Guard: decorator members, defaults and diagnostic codes.
"""

# Decorator members
MEMBER_REDIRECT: str = "redirect"
MEMBER_MESSAGE_CODE: str = "message_code"
MEMBER_PARAMS: str = "params"

DEFAULT_REDIRECT_ACTION: str = "edit"
DEFAULT_REDIRECT_PARAMS: str = "id"
DEFAULT_FLASH_MESSAGE_CODE: str = "optimistic.locking.failure"

# Member name -> default value, in resolution order
MEMBER_DEFAULTS: dict[str, str] = {
    MEMBER_REDIRECT: DEFAULT_REDIRECT_ACTION,
    MEMBER_MESSAGE_CODE: DEFAULT_FLASH_MESSAGE_CODE,
    MEMBER_PARAMS: DEFAULT_REDIRECT_PARAMS,
}

KNOWN_MEMBERS: frozenset[str] = frozenset(MEMBER_DEFAULTS)

DEFAULT_DECORATOR_NAME: str = "optimistic_locking"
# Modules whose attribute-form decorators (@optimistic_guard.optimistic_locking) count as guards
DEFAULT_DECORATOR_MODULE: str = "optimistic_guard"
DEFAULT_FAILURE_TYPE: str = "optimistic_guard.runtime.OptimisticLockingFailure"
DEFAULT_FILTER_FUNCTION: str = "optimistic_guard.runtime.filter_params"

# Key in the generated map argument of message(...)
MESSAGE_CODE_KEY: str = "code"
# Keys in the generated map argument of redirect(...)
REDIRECT_ACTION_KEY: str = "action"
REDIRECT_PARAMS_KEY: str = "params"

CONFIG_SECTION: str = "optimistic-guard"

INTERNAL_ERROR_PREFIX: str = "Internal error"
