"""Rewrite settings loaded from [tool.optimistic-guard]."""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from optimistic_guard.domain.constants import (
    DEFAULT_DECORATOR_MODULE,
    DEFAULT_DECORATOR_NAME,
    DEFAULT_FAILURE_TYPE,
    DEFAULT_FILTER_FUNCTION,
)
from optimistic_guard.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

_IDENTIFIER_KEYS: tuple[str, ...] = (
    "receiver",
    "flash_attribute",
    "message_method",
    "redirect_method",
    "params_attribute",
)
_LIST_KEYS: tuple[str, ...] = ("decorator_names", "decorator_modules")


def split_qualified_name(qualified_name: str) -> tuple[str, str]:
    """Split 'pkg.mod.Name' into ('pkg.mod', 'Name')."""
    module, _, name = qualified_name.rpartition(".")
    return module, name


@dataclass(frozen=True)
class GuardConfig:
    """
    Names the generated recovery body refers to.

    The generated code never binds these names itself; they are resolved
    when the rewritten function runs.
    """

    decorator_names: tuple[str, ...] = (DEFAULT_DECORATOR_NAME,)
    decorator_modules: tuple[str, ...] = (DEFAULT_DECORATOR_MODULE,)
    receiver: str = "self"
    failure_type: str = DEFAULT_FAILURE_TYPE
    filter_function: str = DEFAULT_FILTER_FUNCTION
    flash_attribute: str = "flash"
    flash_key: str = "message"
    message_method: str = "message"
    redirect_method: str = "redirect"
    params_attribute: str = "params"
    add_imports: bool = True

    def __post_init__(self) -> None:
        for key in _IDENTIFIER_KEYS:
            value = getattr(self, key)
            if not isinstance(value, str) or not value.isidentifier():
                raise ConfigurationError(key, f"expected a Python identifier, got {value!r}")
        if not isinstance(self.flash_key, str) or not self.flash_key:
            raise ConfigurationError("flash_key", "expected a non-empty string")
        for key in ("failure_type", "filter_function"):
            value = getattr(self, key)
            if not isinstance(value, str):
                raise ConfigurationError(key, f"expected a dotted name, got {value!r}")
            module, name = split_qualified_name(value)
            if not module or not name.isidentifier():
                raise ConfigurationError(key, f"expected 'module.Name', got {value!r}")
        if not self.decorator_names or not all(
            isinstance(n, str) and n.isidentifier() for n in self.decorator_names
        ):
            raise ConfigurationError("decorator_names", "expected a non-empty list of identifiers")
        if not all(
            isinstance(m, str) and m and all(part.isidentifier() for part in m.split("."))
            for m in self.decorator_modules
        ):
            raise ConfigurationError("decorator_modules", "expected a list of dotted module names")
        if not isinstance(self.add_imports, bool):
            raise ConfigurationError("add_imports", "expected a boolean")

    @property
    def failure_type_name(self) -> str:
        return split_qualified_name(self.failure_type)[1]

    @property
    def filter_function_name(self) -> str:
        return split_qualified_name(self.filter_function)[1]

    def matches_decorator(self, dotted_name: str) -> bool:
        """
        Whether a decorator written as dotted_name is the guard.

        'optimistic_locking' matches by name alone; 'pkg.optimistic_locking'
        also needs pkg to be one of decorator_modules or a submodule of one.
        """
        module, name = split_qualified_name(dotted_name)
        if name not in self.decorator_names:
            return False
        if not module:
            return True
        return any(module == m or module.startswith(m + ".") for m in self.decorator_modules)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "GuardConfig":
        """Build a config from a [tool.optimistic-guard] table, validating each value."""
        known = {f.name for f in fields(cls) if f.init}
        kwargs: dict[str, Any] = {}
        for key, value in raw.items():
            normalized = key.replace("-", "_")
            if normalized not in known:
                logger.warning("Configuration Warning: unknown key '%s' ignored.", key)
                continue
            kwargs[normalized] = value
        for key in _LIST_KEYS:
            names = kwargs.get(key)
            if isinstance(names, str):
                kwargs[key] = (names,)
            elif isinstance(names, list):
                kwargs[key] = tuple(names)
            elif names is not None:
                raise ConfigurationError(key, f"expected a list of names, got {names!r}")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in _LIST_KEYS:
            data[key] = list(getattr(self, key))
        return data
