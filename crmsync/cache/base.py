"""Base cache class for diskcache-backed storage."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from diskcache import Cache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseCacheManager(ABC, Generic[T]):
    """Abstract base class for cache managers."""

    def __init__(self, cache_dir: Path, cache_subdir: str | None = None) -> None:
        """Initialize cache manager.

        Args:
            cache_dir: Root directory for cached data
            cache_subdir: Optional subdirectory within the cache directory
        """
        cache_path = Path(cache_dir)
        if cache_subdir:
            cache_path = cache_path / cache_subdir

        cache_path.mkdir(parents=True, exist_ok=True)

        # Initialize DiskCache
        self.cache = Cache(str(cache_path))
        self.cache_path = cache_path

        logger.debug(f"Initialized cache at {cache_path}")

    def clear_cache(self) -> None:
        """Clear all cached data."""
        try:
            self.cache.clear()
            logger.info(f"Cleared cache at {self.cache_path}")
        except Exception as e:
            logger.error(f"Error clearing cache: {e}")

    def has_cache(self) -> bool:
        """Check if any cache exists.

        Returns:
            True if cache has any entries
        """
        return len(self.cache) > 0

    def exists(self, key: str) -> bool:
        """Check if a cache key exists.

        Args:
            key: Cache key to check

        Returns:
            True if key exists in cache
        """
        return key in self.cache

    def close(self) -> None:
        """Close the underlying cache."""
        self.cache.close()

    @abstractmethod
    def save(self, key: str, data: T) -> None:
        """Save data to cache.

        Args:
            key: Cache key
            data: Data to cache
        """
        pass

    @abstractmethod
    def load(self, key: str) -> T | None:
        """Load data from cache.

        Args:
            key: Cache key

        Returns:
            Cached data or None if not found
        """
        pass
