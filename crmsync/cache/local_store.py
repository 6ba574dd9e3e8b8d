"""Persisted local cache of the server-owned CRM collections."""

import copy
import json
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from crmsync.cache.storage import SnapshotStorage
from crmsync.cache.subscribers import Subscriber, SubscriberRegistry, Unsubscribe
from crmsync.core.constants import DEFAULT_STORAGE_KEY, Collection, SyncConstants
from crmsync.exceptions import UnknownCollectionError, ValidationError
from crmsync.models.snapshot import LocalData

logger = logging.getLogger(__name__)

RecordId = str | int


def _same_id(record: dict[str, Any], record_id: RecordId) -> bool:
    # Server ids are numeric, CLI arguments and temporary ids may be strings
    return "id" in record and str(record["id"]) == str(record_id)


class LocalStore:
    """Local-first copy of every tracked collection.

    Reads are served from memory. Every mutation rewrites the whole snapshot
    to durable storage and then notifies subscribers. Storage failures are
    logged and never raised; the in-memory snapshot stays authoritative for
    the rest of the session.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        storage_key: str = DEFAULT_STORAGE_KEY,
        default_sync_interval: int = int(SyncConstants.DEFAULT_SYNC_INTERVAL_MINUTES),
    ) -> None:
        """Initialize the store and load any previously persisted snapshot.

        Args:
            storage: Durable key/value storage for the serialized snapshot
            storage_key: Key the snapshot is stored under
            default_sync_interval: Sync interval used when storage holds none
        """
        self.storage = storage
        self.storage_key = storage_key
        self.default_sync_interval = default_sync_interval
        self.subscribers = SubscriberRegistry()
        self._data = self._load_from_storage()

    def __enter__(self) -> "LocalStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying storage."""
        self.storage.close()
        logger.debug(f"Closed snapshot storage for '{self.storage_key}'")

    def _defaults(self) -> LocalData:
        return LocalData(sync_interval_minutes=self.default_sync_interval)

    def _load_from_storage(self) -> LocalData:
        """Shallow-merge the stored document over the defaults.

        Each stored field is checked on its own; a field that fails validation
        keeps its default and the remaining fields are still loaded.
        """
        defaults = self._defaults()
        try:
            stored = self.storage.load(self.storage_key)
            if not stored:
                return defaults
            parsed = json.loads(stored)
            if not isinstance(parsed, dict):
                raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
        except Exception as e:
            logger.error(f"Error loading local data: {e}")
            return defaults

        merged = defaults.model_dump(by_alias=True)
        for key, value in parsed.items():
            candidate = {**merged, key: value}
            try:
                LocalData.model_validate(candidate)
            except PydanticValidationError as e:
                logger.warning(f"Ignoring invalid stored field '{key}': {e.errors()[0]['msg']}")
                continue
            merged = candidate

        data = LocalData.model_validate(merged)
        logger.debug(f"Loaded snapshot '{self.storage_key}': {data.counts()}")
        return data

    def _save_to_storage(self) -> None:
        try:
            self.storage.save(self.storage_key, self._data.model_dump_json(by_alias=True))
        except Exception as e:
            logger.error(f"Error saving local data: {e}")

    def _commit(self) -> None:
        self._save_to_storage()
        self.subscribers.notify(self.snapshot())

    # Subscriptions

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Register ``callback`` to receive the snapshot after every mutation."""
        return self.subscribers.subscribe(callback)

    # Reads

    def get(self, collection: Collection | str) -> list[dict[str, Any]]:
        """Return a detached copy of the cached records of a collection (empty if never loaded)."""
        try:
            return copy.deepcopy(self._data.records(Collection.parse(collection)))
        except UnknownCollectionError as e:
            logger.warning(str(e))
            return []

    def find(self, collection: Collection | str, record_id: RecordId) -> dict[str, Any] | None:
        """Return the cached record with ``record_id``, if any."""
        for record in self.get(collection):
            if _same_id(record, record_id):
                return record
        return None

    def snapshot(self) -> LocalData:
        """Deep copy of the current snapshot."""
        return self._data.model_copy(deep=True)

    @property
    def last_sync(self) -> str:
        return self._data.last_sync

    @property
    def sync_interval_minutes(self) -> int:
        return self._data.sync_interval_minutes

    # Mutations

    def replace_all(self, collection: Collection | str, records: list[dict[str, Any]]) -> None:
        """Overwrite every record of a collection."""
        collection = Collection.parse(collection)
        self._data.set_records(collection, copy.deepcopy(list(records)))
        logger.debug(f"Replaced {collection} with {len(records)} records")
        self._commit()

    def insert_one(self, collection: Collection | str, record: dict[str, Any], index: int | None = None) -> None:
        """Add a record, appended unless ``index`` is given."""
        collection = Collection.parse(collection)
        records = self._data.records(collection)
        stored = copy.deepcopy(record)
        if index is None:
            records.append(stored)
        else:
            records.insert(index, stored)
        logger.debug(f"Inserted record {record.get('id')} into {collection}")
        self._commit()

    def patch_one(self, collection: Collection | str, record_id: RecordId, fields: dict[str, Any]) -> bool:
        """Shallow-merge ``fields`` into a record.

        Returns:
            False (and leaves the cache untouched) when no record has ``record_id``
        """
        collection = Collection.parse(collection)
        records = self._data.records(collection)
        for index, record in enumerate(records):
            if _same_id(record, record_id):
                records[index] = {**record, **copy.deepcopy(fields)}
                self._commit()
                return True

        logger.debug(f"patch_one: no record {record_id} in {collection}")
        return False

    def replace_one(self, collection: Collection | str, record_id: RecordId, record: dict[str, Any]) -> bool:
        """Swap the record with ``record_id`` for ``record`` in place."""
        collection = Collection.parse(collection)
        records = self._data.records(collection)
        for index, existing in enumerate(records):
            if _same_id(existing, record_id):
                records[index] = copy.deepcopy(record)
                self._commit()
                return True

        logger.debug(f"replace_one: no record {record_id} in {collection}")
        return False

    def delete_one(self, collection: Collection | str, record_id: RecordId) -> bool:
        """Remove the record with ``record_id``.

        Returns:
            False (and leaves the cache untouched) when no record has ``record_id``
        """
        collection = Collection.parse(collection)
        records = self._data.records(collection)
        for index, record in enumerate(records):
            if _same_id(record, record_id):
                del records[index]
                self._commit()
                return True

        logger.debug(f"delete_one: no record {record_id} in {collection}")
        return False

    def set_last_sync(self, timestamp: str) -> None:
        """Record the time of the last successful sync (ISO-8601)."""
        self._data.last_sync = timestamp
        self._commit()

    def set_sync_interval(self, minutes: int) -> None:
        """Change the background sync interval.

        Raises:
            ValidationError: If ``minutes`` is not positive
        """
        if minutes <= 0:
            raise ValidationError("sync_interval_minutes", minutes, "Sync interval must be a positive number of minutes")
        self._data.sync_interval_minutes = minutes
        self._commit()

    def clear(self) -> None:
        """Reset every collection and the sync metadata to defaults."""
        self._data = self._defaults()
        logger.info(f"Cleared local snapshot '{self.storage_key}'")
        self._commit()
