"""
FileVault storage disks.

A disk maps relative file names to absolute paths under a root directory.
The vault resolves both source and destination through the same disk.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping

from .errors import ConfigurationError, StreamIOError
from .utils.logging import get_logger

logger = get_logger(__name__)


class StorageBackend(ABC):
    """Abstract base class for storage disks."""

    @abstractmethod
    def path(self, name: str) -> Path:
        """Absolute path for a file name on this disk."""
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Delete a file from this disk."""
        pass


class LocalStorageBackend(StorageBackend):
    """Local filesystem disk."""

    def __init__(self, base_path: str = "storage/app"):
        self.base_path = Path(base_path).resolve()

    def path(self, name: str) -> Path:
        # Refuse names that resolve outside the disk root
        full = (self.base_path / name).resolve()
        try:
            full.relative_to(self.base_path)
        except ValueError:
            raise StreamIOError(f"Path escapes disk root: {name}", path=name)
        return full

    def delete(self, name: str) -> None:
        path = self.path(name)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted {path}")


class DiskManager:
    """Resolves configured disk names to backends, caching each one."""

    def __init__(self, disks: Mapping[str, str]):
        self._roots = dict(disks)
        self._backends: Dict[str, StorageBackend] = {}

    def disk(self, name: str) -> StorageBackend:
        if name not in self._backends:
            if name not in self._roots:
                raise ConfigurationError(f"disk '{name}' is not configured")
            self._backends[name] = LocalStorageBackend(self._roots[name])
        return self._backends[name]
