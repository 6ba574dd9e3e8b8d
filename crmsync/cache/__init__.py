"""Cache module for crmsync."""

from crmsync.cache.base import BaseCacheManager
from crmsync.cache.local_store import LocalStore
from crmsync.cache.storage import DiskSnapshotStorage, SnapshotStorage
from crmsync.cache.subscribers import SubscriberRegistry

__all__ = [
    "BaseCacheManager",
    "DiskSnapshotStorage",
    "LocalStore",
    "SnapshotStorage",
    "SubscriberRegistry",
]
