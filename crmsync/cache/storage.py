"""Durable storage for the serialized cache snapshot."""

import logging
from pathlib import Path
from typing import Protocol

from crmsync.cache.base import BaseCacheManager
from crmsync.exceptions import StorageError

logger = logging.getLogger(__name__)


class SnapshotStorage(Protocol):
    """Key/value storage holding one JSON document per key."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, data: str) -> None: ...

    def close(self) -> None: ...


class DiskSnapshotStorage(BaseCacheManager[str]):
    """Stores snapshot JSON in a DiskCache directory.

    Each ``save`` overwrites the whole document in a single write.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize snapshot storage under ``cache_dir/snapshots``."""
        super().__init__(cache_dir, cache_subdir="snapshots")

    def save(self, key: str, data: str) -> None:
        """Write the snapshot document.

        Raises:
            StorageError: If DiskCache fails to write
        """
        try:
            self.cache.set(key, data)
        except Exception as e:
            raise StorageError(f"Could not write snapshot '{key}': {e}", {"path": str(self.cache_path)}) from e
        logger.debug(f"Wrote {len(data)} bytes to snapshot '{key}'")

    def load(self, key: str) -> str | None:
        """Read the snapshot document.

        Raises:
            StorageError: If DiskCache fails to read or holds a non-string value
        """
        try:
            data = self.cache.get(key)
        except Exception as e:
            raise StorageError(f"Could not read snapshot '{key}': {e}", {"path": str(self.cache_path)}) from e

        if data is None:
            return None
        if not isinstance(data, str):
            raise StorageError(f"Snapshot '{key}' holds {type(data).__name__}, expected JSON text")
        return data
