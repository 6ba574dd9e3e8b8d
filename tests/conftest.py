from __future__ import annotations

import copy
from typing import Any

import pytest

from crmsync.cache.local_store import LocalStore
from crmsync.core.constants import Collection
from crmsync.exceptions import StorageError


class MemoryStorage:
    """In-memory stand-in for DiskSnapshotStorage."""

    def __init__(self) -> None:
        self.documents: dict[str, str] = {}
        self.writes = 0
        self.fail_reads = False
        self.fail_writes = False
        self.closed = False

    def load(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError("read failed")
        return self.documents.get(key)

    def save(self, key: str, data: str) -> None:
        if self.fail_writes:
            raise StorageError("write failed")
        self.documents[key] = data
        self.writes += 1

    def close(self) -> None:
        self.closed = True


class ScriptedClient:
    """Collection API stub answering from a script instead of the network."""

    def __init__(self, responses: dict[Collection, Any] | None = None) -> None:
        self.responses: dict[Collection, Any] = dict(responses or {})
        self.write_error: Exception | None = None
        self.calls: list[tuple[Any, ...]] = []
        self.next_id = 1000

    def __enter__(self) -> ScriptedClient:
        return self

    def __exit__(self, *args: Any) -> None:
        pass

    def list_records(self, collection: Collection) -> list[dict[str, Any]]:
        self.calls.append(("list", collection))
        response = self.responses.get(collection, [])
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def create_record(self, collection: Collection, draft: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", collection, draft))
        if self.write_error:
            raise self.write_error
        self.next_id += 1
        return {**draft, "id": self.next_id, "createdBy": "server"}

    def update_record(self, collection: Collection, record_id: str | int, patch: dict[str, Any]) -> Any:
        self.calls.append(("update", collection, record_id, patch))
        if self.write_error:
            raise self.write_error
        return {"id": record_id, **patch}

    def delete_record(self, collection: Collection, record_id: str | int) -> None:
        self.calls.append(("delete", collection, record_id))
        if self.write_error:
            raise self.write_error

    def list_calls(self) -> list[Collection]:
        return [call[1] for call in self.calls if call[0] == "list"]


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> LocalStore:
    return LocalStore(storage)


@pytest.fixture
def client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def notifications(store: LocalStore) -> list[Any]:
    """Snapshots delivered to a subscriber registered on ``store``."""
    received: list[Any] = []
    store.subscribe(received.append)
    return received
