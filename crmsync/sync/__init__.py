"""Cache/server reconciliation: background sync, optimistic mutations, staleness."""

from crmsync.sync.background import BackgroundSync
from crmsync.sync.fallback import seed_fallback_data
from crmsync.sync.mutations import OptimisticMutations
from crmsync.sync.staleness import format_last_sync, is_stale

__all__ = [
    "BackgroundSync",
    "OptimisticMutations",
    "format_last_sync",
    "is_stale",
    "seed_fallback_data",
]
