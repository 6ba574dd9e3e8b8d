"""Optimistic create/update/delete against the local cache."""

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine, Iterable
from typing import Any, Literal

from crmsync.api.base import CollectionAPI
from crmsync.cache.local_store import LocalStore, RecordId
from crmsync.core.constants import Collection, ConflictPolicy
from crmsync.models.stats import MutationResult

logger = logging.getLogger(__name__)

Operation = Literal["create", "update", "delete"]


class OptimisticMutations:
    """Applies mutations to the cache first and confirms them with the server later.

    Every public mutation changes the cache synchronously and returns at once;
    the matching server request runs as an asyncio task, so these methods
    must be called from a running event loop. What happens to a change the
    server rejects is decided by ``policy``.
    """

    def __init__(
        self,
        store: LocalStore,
        client: CollectionAPI,
        policy: ConflictPolicy = ConflictPolicy.KEEP_LOCAL_ON_FAILURE,
    ) -> None:
        self.store = store
        self.client = client
        self.policy = policy
        self.results: list[MutationResult] = []
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of server requests still in flight."""
        return len(self._pending)

    def _temporary_id(self, collection: Collection) -> int:
        """Millisecond timestamp, bumped until unique within the collection."""
        taken = {str(record.get("id")) for record in self.store.get(collection)}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return candidate

    def _schedule(self, loop: asyncio.AbstractEventLoop, coro: Coroutine[Any, Any, None], name: str) -> None:
        task = loop.create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _record_failure(
        self,
        collection: Collection,
        operation: Operation,
        record_id: RecordId,
        error: Exception,
        revert: Callable[[], Any],
    ) -> None:
        reverted = False
        if self.policy is ConflictPolicy.REVERT_ON_FAILURE:
            revert()
            reverted = True
            logger.error(f"Server {operation} of {collection} {record_id} failed, local change reverted: {error}")
        else:
            logger.error(f"Server {operation} of {collection} {record_id} failed, keeping local change: {error}")

        self.results.append(
            MutationResult(
                collection=collection.value,
                operation=operation,
                record_id=str(record_id),
                success=False,
                error=str(error),
                reverted=reverted,
            )
        )

    # Create

    def create_record(self, collection: Collection | str, draft: dict[str, Any]) -> dict[str, Any]:
        """Insert ``draft`` under a temporary id and POST it in the background.

        Returns:
            The locally inserted record
        """
        loop = asyncio.get_running_loop()
        collection = Collection.parse(collection)

        payload = {key: value for key, value in draft.items() if key != "id"}
        local_record = {**payload, "id": self._temporary_id(collection)}
        self.store.insert_one(collection, local_record)

        self._schedule(
            loop,
            self._confirm_create(collection, payload, local_record["id"]),
            name=f"create-{collection}-{local_record['id']}",
        )
        return dict(local_record)

    async def _confirm_create(self, collection: Collection, payload: dict[str, Any], temporary_id: int) -> None:
        try:
            server_record = await asyncio.to_thread(self.client.create_record, collection, payload)
        except Exception as e:
            self._record_failure(
                collection, "create", temporary_id, e, revert=lambda: self.store.delete_one(collection, temporary_id)
            )
            return

        if not self.store.patch_one(collection, temporary_id, server_record):
            logger.debug(f"Temporary {collection} record {temporary_id} was replaced before the server confirmed it")

        self.results.append(
            MutationResult(
                collection=collection.value,
                operation="create",
                record_id=str(temporary_id),
                success=True,
                server_id=str(server_record.get("id")),
            )
        )

    # Update

    def update_record(self, collection: Collection | str, record_id: RecordId, patch: dict[str, Any]) -> bool:
        """Patch a cached record and PUT the patch in the background.

        Returns:
            Whether the record was found in the cache (the request is sent either way)
        """
        loop = asyncio.get_running_loop()
        collection = Collection.parse(collection)

        previous = self.store.find(collection, record_id)
        applied = self.store.patch_one(collection, record_id, patch)

        self._schedule(
            loop,
            self._confirm_update(collection, record_id, dict(patch), previous),
            name=f"update-{collection}-{record_id}",
        )
        return applied

    async def _confirm_update(
        self,
        collection: Collection,
        record_id: RecordId,
        patch: dict[str, Any],
        previous: dict[str, Any] | None,
    ) -> None:
        try:
            await asyncio.to_thread(self.client.update_record, collection, record_id, patch)
        except Exception as e:

            def revert() -> None:
                if previous is not None:
                    self.store.replace_one(collection, record_id, previous)

            self._record_failure(collection, "update", record_id, e, revert=revert)
            return

        self.results.append(
            MutationResult(collection=collection.value, operation="update", record_id=str(record_id), success=True)
        )

    # Delete

    def delete_record(self, collection: Collection | str, record_id: RecordId) -> bool:
        """Remove a cached record and DELETE it in the background.

        Returns:
            Whether the record was found in the cache (the request is sent either way)
        """
        loop = asyncio.get_running_loop()
        collection = Collection.parse(collection)

        records = self.store.get(collection)
        position = next((i for i, r in enumerate(records) if str(r.get("id")) == str(record_id)), None)
        previous = records[position] if position is not None else None
        removed = self.store.delete_one(collection, record_id)

        self._schedule(
            loop,
            self._confirm_delete(collection, record_id, previous, position),
            name=f"delete-{collection}-{record_id}",
        )
        return removed

    async def _confirm_delete(
        self,
        collection: Collection,
        record_id: RecordId,
        previous: dict[str, Any] | None,
        position: int | None,
    ) -> None:
        try:
            await asyncio.to_thread(self.client.delete_record, collection, record_id)
        except Exception as e:

            def revert() -> None:
                if previous is not None and self.store.find(collection, record_id) is None:
                    self.store.insert_one(collection, previous, index=position)

            self._record_failure(collection, "delete", record_id, e, revert=revert)
            return

        self.results.append(
            MutationResult(collection=collection.value, operation="delete", record_id=str(record_id), success=True)
        )

    # Bulk operations

    def bulk_update(self, collection: Collection | str, record_ids: Iterable[RecordId], patch: dict[str, Any]) -> int:
        """Apply the same patch to several records.

        Returns:
            Number of records found in the cache
        """
        return sum(self.update_record(collection, record_id, patch) for record_id in record_ids)

    def bulk_delete(self, collection: Collection | str, record_ids: Iterable[RecordId]) -> int:
        """Delete several records.

        Returns:
            Number of records found in the cache
        """
        return sum(self.delete_record(collection, record_id) for record_id in record_ids)

    def bulk_duplicate(
        self,
        collection: Collection | str,
        record_ids: Iterable[RecordId],
        title_field: str = "title",
    ) -> list[dict[str, Any]]:
        """Create a copy of each cached record, suffixing its title with " (Copy)".

        Ids missing from the cache are skipped.
        """
        copies = []
        for record_id in record_ids:
            original = self.store.find(collection, record_id)
            if original is None:
                logger.debug(f"bulk_duplicate: no record {record_id} in {collection}")
                continue

            draft = {key: value for key, value in original.items() if key != "id"}
            if draft.get(title_field):
                draft[title_field] = f"{draft[title_field]} (Copy)"
            copies.append(self.create_record(collection, draft))
        return copies

    async def drain(self) -> list[MutationResult]:
        """Wait for every in-flight server request to settle.

        Returns:
            All results recorded so far
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return list(self.results)
