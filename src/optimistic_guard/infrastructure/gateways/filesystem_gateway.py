"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

from collections.abc import Iterable
from pathlib import Path

from optimistic_guard.domain.protocols import FileSystemProtocol


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def iter_python_files(self, paths: Iterable[Path]) -> list[Path]:
        """Python files under each path (recursive for directories), sorted and deduplicated."""
        found: dict[Path, None] = {}
        for path in paths:
            if path.is_dir():
                for p in sorted(path.glob("**/*.py")):
                    found[p] = None
            elif path.suffix == ".py":
                found[path] = None
        return list(found)
