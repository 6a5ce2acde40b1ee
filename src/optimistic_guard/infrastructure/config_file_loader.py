"""Load [tool.optimistic-guard] from pyproject.toml. Infrastructure I/O only."""

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.domain.constants import CONFIG_SECTION
from optimistic_guard.domain.errors import ConfigurationError


class ConfigFileLoader:
    """Loads the rewrite settings from the nearest pyproject.toml."""

    @staticmethod
    def find_pyproject(start: Optional[Path] = None) -> Optional[Path]:
        """Walk upwards from start (default: cwd) to the first pyproject.toml."""
        current_path = (start or Path.cwd()).resolve()
        for candidate in (current_path, *current_path.parents):
            config_file = candidate / "pyproject.toml"
            if config_file.is_file():
                return config_file
        return None

    @staticmethod
    def load_section(config_file: Path) -> dict[str, object]:
        """Return the [tool.optimistic-guard] table, or {} when absent."""
        try:
            with config_file.open("rb") as f:
                data = toml_lib.load(f)
        except toml_lib.TOMLDecodeError as exc:
            raise ConfigurationError(str(config_file), f"not valid TOML ({exc})") from exc
        tool_section = data.get("tool", {}) or {}
        section = tool_section.get(CONFIG_SECTION, {}) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(CONFIG_SECTION, "expected a table")
        return section

    @classmethod
    def load_config_from_fs(cls, start: Optional[Path] = None) -> GuardConfig:
        """Load settings from the nearest pyproject.toml; defaults when there is none."""
        config_file = cls.find_pyproject(start)
        if config_file is None:
            return GuardConfig()
        return GuardConfig.from_mapping(cls.load_section(config_file))
