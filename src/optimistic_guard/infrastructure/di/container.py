from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, cast

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.infrastructure.config_file_loader import ConfigFileLoader
from optimistic_guard.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from optimistic_guard.infrastructure.gateways.libcst_rewrite_gateway import LibCSTRewriteGateway
from optimistic_guard.interface.reporters import TerminalRewriteReporter

if TYPE_CHECKING:
    from optimistic_guard.domain.protocols import FileSystemProtocol, RewriteGatewayProtocol
    from optimistic_guard.interface.reporters import RewriteReporter


class GuardContainer:
    """Dependency Injection Container for optimistic-guard."""

    _instance: Optional["GuardContainer"] = None

    def __init__(self, config: Optional[GuardConfig] = None, project_root: Optional[Path] = None) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults(config, project_root)

    def _register_defaults(self, config: Optional[GuardConfig], project_root: Optional[Path]) -> None:
        """Register default implementations for protocols."""
        if config is None:
            config = ConfigFileLoader.load_config_from_fs(project_root)
        self.register_singleton("GuardConfig", config)
        self.register_singleton("FileSystemGateway", FileSystemGateway())
        self.register_singleton("LibCSTRewriteGateway", LibCSTRewriteGateway(config))
        self.register_singleton("RewriteReporter", TerminalRewriteReporter())

    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_config(self) -> GuardConfig:
        return cast(GuardConfig, self.get("GuardConfig"))

    def get_filesystem_gateway(self) -> "FileSystemProtocol":
        """Return the filesystem gateway."""
        return cast("FileSystemProtocol", self.get("FileSystemGateway"))

    def get_rewrite_gateway(self) -> "RewriteGatewayProtocol":
        """Return the LibCST rewrite gateway."""
        return cast("RewriteGatewayProtocol", self.get("LibCSTRewriteGateway"))

    def get_reporter(self) -> "RewriteReporter":
        """Return the rewrite reporter."""
        return cast("RewriteReporter", self.get("RewriteReporter"))

    @classmethod
    def get_instance(cls) -> "GuardContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = GuardContainer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None
