"""Background reconciliation of the local cache with the server."""

import asyncio
import json
import logging
import time
from collections.abc import Iterable
from typing import Any

from crmsync.api.base import CollectionAPI
from crmsync.cache.local_store import LocalStore
from crmsync.core.constants import Collection, SyncConstants
from crmsync.models.snapshot import SyncStatus
from crmsync.models.stats import SyncReport
from crmsync.sync.staleness import format_last_sync, is_stale, utc_now_iso

logger = logging.getLogger(__name__)


def _canonical(records: list[dict[str, Any]]) -> str:
    return json.dumps(records, sort_keys=True, separators=(",", ":"), default=str)


class BackgroundSync:
    """Periodically re-fetches every tracked collection.

    A collection is replaced (and subscribers notified) only when the fetched
    records differ from the cached ones. A failed fetch keeps the cached data.

    Usage:
        sync = BackgroundSync(store, client)
        await sync.start()
        # ... later ...
        await sync.stop()
    """

    def __init__(
        self,
        store: LocalStore,
        client: CollectionAPI,
        collections: Iterable[Collection | str] | None = None,
        interval_seconds: float | None = None,
    ) -> None:
        """Initialize the sync loop.

        Args:
            store: Cache to reconcile
            client: API used to fetch collections
            collections: Collections to track (defaults to all of them)
            interval_seconds: Fixed loop interval; by default the store's
                ``sync_interval_minutes`` is read before every wait
        """
        self.store = store
        self.client = client
        self.collections = [Collection.parse(c) for c in collections] if collections else list(Collection)
        self.interval_seconds = interval_seconds

        self._task: asyncio.Task | None = None
        self._stop_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_sync(self) -> str:
        return self.store.last_sync

    def _interval(self) -> float:
        if self.interval_seconds is not None:
            return self.interval_seconds
        return self.store.sync_interval_minutes * SyncConstants.SECONDS_PER_MINUTE

    async def _sync_collection(self, collection: Collection, report: SyncReport) -> None:
        try:
            records = await asyncio.to_thread(self.client.list_records, collection)
        except Exception as e:
            logger.error(f"Sync of {collection} failed, keeping cached data: {e}")
            report.failed[collection.value] = str(e)
            return

        if _canonical(records) == _canonical(self.store.get(collection)):
            report.unchanged.append(collection.value)
            return

        self.store.replace_all(collection, records)
        report.updated.append(collection.value)
        logger.info(f"{collection} updated from server ({len(records)} records)")

    async def sync_once(self, update_last_sync: bool = False) -> SyncReport:
        """Run one fetch-compare-replace cycle over every tracked collection.

        Collections are fetched concurrently and applied as each completes.

        Args:
            update_last_sync: Stamp ``last_sync`` when at least one collection
                was fetched

        Returns:
            Which collections were updated, unchanged or failed
        """
        report = SyncReport(started_at=time.time())
        logger.debug(f"Starting sync of {len(self.collections)} collections")

        await asyncio.gather(*(self._sync_collection(c, report) for c in self.collections))

        if update_last_sync and report.any_succeeded:
            report.last_sync = utc_now_iso()
            self.store.set_last_sync(report.last_sync)

        report.finished_at = time.time()
        logger.info(
            f"Sync finished: {len(report.updated)} updated, {len(report.unchanged)} unchanged, "
            f"{len(report.failed)} failed"
        )
        return report

    async def force_sync_now(self) -> SyncReport:
        """Sync immediately, independent of the timer, and stamp ``last_sync``."""
        return await self.sync_once(update_last_sync=True)

    def is_stale(self) -> bool:
        return is_stale(self.store.last_sync, self.store.sync_interval_minutes)

    def status(self) -> SyncStatus:
        """Current staleness information."""
        last_sync = self.store.last_sync
        return SyncStatus(
            last_sync=last_sync,
            last_sync_label=format_last_sync(last_sync),
            is_stale=self.is_stale(),
            sync_interval_minutes=self.store.sync_interval_minutes,
        )

    async def start(self) -> None:
        """Run an initial sync now and then one every interval, in the background."""
        if self._task is not None:
            logger.warning("Background sync already running")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name="crmsync-background-sync")

        def _on_task_done(task: asyncio.Task) -> None:
            if task.cancelled():
                logger.debug("Background sync task was cancelled")
            elif task.exception():
                logger.error(f"Background sync task crashed: {task.exception()}")

        self._task.add_done_callback(_on_task_done)
        logger.info("Background sync started")

    async def stop(self) -> None:
        """Stop the background loop."""
        if self._task is None:
            return

        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Background sync stopped")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await self.sync_once(update_last_sync=True)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval())
            except asyncio.TimeoutError:
                continue
