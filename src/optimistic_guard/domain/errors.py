"""Exception hierarchy for optimistic-guard."""


class OptimisticGuardError(Exception):
    """Base class for errors raised by optimistic-guard itself."""


class ConfigurationError(OptimisticGuardError):
    """Raised when [tool.optimistic-guard] holds an invalid value."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for '{key}': {reason}")
