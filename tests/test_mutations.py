from __future__ import annotations

import pytest

from crmsync.core.constants import Collection, ConflictPolicy
from crmsync.exceptions import APIError
from crmsync.sync.mutations import OptimisticMutations


@pytest.fixture
def mutations(store, client):
    return OptimisticMutations(store, client)


@pytest.fixture
def reverting(store, client):
    return OptimisticMutations(store, client, policy=ConflictPolicy.REVERT_ON_FAILURE)


@pytest.mark.asyncio
async def test_create_applies_locally_before_server_answers(store, client, mutations):
    draft = {"name": "Initech", "status": "active"}

    local = mutations.create_record(Collection.CLIENTS, draft)

    assert store.get(Collection.CLIENTS) == [local]
    assert local["name"] == "Initech"
    assert isinstance(local["id"], int)
    assert mutations.pending == 1
    assert client.calls == []

    await mutations.drain()


@pytest.mark.asyncio
async def test_create_success_replaces_temporary_id(store, client, mutations):
    local = mutations.create_record(Collection.CLIENTS, {"name": "Initech"})

    results = await mutations.drain()

    assert client.calls == [("create", Collection.CLIENTS, {"name": "Initech"})]
    assert store.get(Collection.CLIENTS) == [{"name": "Initech", "id": 1001, "createdBy": "server"}]
    assert results[0].success
    assert results[0].record_id == str(local["id"])
    assert results[0].server_id == "1001"


@pytest.mark.asyncio
async def test_create_failure_keeps_optimistic_record(store, client, mutations):
    client.write_error = APIError(500, "Server error in POST /api/clients")
    draft = {"name": "Initech", "email": "info@initech.example"}

    local = mutations.create_record("clients", draft)
    results = await mutations.drain()

    cached = store.get(Collection.CLIENTS)
    assert cached == [{**draft, "id": local["id"]}]
    assert results[0].success is False
    assert results[0].reverted is False
    assert "Server error" in results[0].error


@pytest.mark.asyncio
async def test_create_failure_reverts_under_revert_policy(store, client, reverting):
    client.write_error = ConnectionError("offline")

    reverting.create_record(Collection.PROJECTS, {"name": "Kiosk"})
    results = await reverting.drain()

    assert store.get(Collection.PROJECTS) == []
    assert results[0].reverted is True


@pytest.mark.asyncio
async def test_create_drops_caller_supplied_id(store, client, mutations):
    local = mutations.create_record(Collection.TASKS, {"id": 5, "title": "Mount screen"})
    await mutations.drain()

    assert local["id"] != 5
    assert client.calls[0][2] == {"title": "Mount screen"}


@pytest.mark.asyncio
async def test_temporary_ids_are_unique(store, client, mutations):
    client.write_error = ConnectionError("offline")

    first = mutations.create_record(Collection.TASKS, {"title": "a"})
    second = mutations.create_record(Collection.TASKS, {"title": "b"})
    await mutations.drain()

    assert first["id"] != second["id"]


@pytest.mark.asyncio
async def test_create_confirmation_after_sync_replace_is_noop(store, client, mutations):
    mutations.create_record(Collection.CLIENTS, {"name": "Initech"})
    store.replace_all(Collection.CLIENTS, [{"id": 1001, "name": "Initech"}])

    await mutations.drain()

    assert store.get(Collection.CLIENTS) == [{"id": 1001, "name": "Initech"}]


@pytest.mark.asyncio
async def test_update_applies_locally_and_sends_patch(store, client, mutations):
    store.replace_all(Collection.TASKS, [{"id": 3, "title": "Pull cable", "status": "todo"}])

    assert mutations.update_record(Collection.TASKS, 3, {"status": "done"}) is True
    assert store.find(Collection.TASKS, 3)["status"] == "done"

    results = await mutations.drain()
    assert client.calls == [("update", Collection.TASKS, 3, {"status": "done"})]
    assert results[0].success


@pytest.mark.asyncio
async def test_update_failure_keeps_local_change(store, client, mutations):
    store.replace_all(Collection.TASKS, [{"id": 3, "status": "todo"}])
    client.write_error = APIError(500, "boom")

    mutations.update_record(Collection.TASKS, 3, {"status": "done"})
    await mutations.drain()

    assert store.get(Collection.TASKS) == [{"id": 3, "status": "done"}]


@pytest.mark.asyncio
async def test_update_failure_restores_previous_record_under_revert_policy(store, client, reverting):
    store.replace_all(Collection.TASKS, [{"id": 3, "status": "todo"}])
    client.write_error = APIError(500, "boom")

    reverting.update_record(Collection.TASKS, 3, {"status": "done", "note": "added"})
    await reverting.drain()

    assert store.get(Collection.TASKS) == [{"id": 3, "status": "todo"}]


@pytest.mark.asyncio
async def test_update_of_uncached_record_still_reaches_server(store, client, mutations):
    assert mutations.update_record(Collection.TASKS, 77, {"status": "done"}) is False

    await mutations.drain()

    assert client.calls == [("update", Collection.TASKS, 77, {"status": "done"})]


@pytest.mark.asyncio
async def test_delete_applies_locally(store, client, mutations):
    store.replace_all(Collection.CLIENTS, [{"id": 1}, {"id": 2}])

    assert mutations.delete_record(Collection.CLIENTS, 1) is True
    assert store.get(Collection.CLIENTS) == [{"id": 2}]

    await mutations.drain()
    assert client.calls == [("delete", Collection.CLIENTS, 1)]


@pytest.mark.asyncio
async def test_delete_failure_keeps_record_deleted(store, client, mutations):
    store.replace_all(Collection.CLIENTS, [{"id": 1}, {"id": 2}])
    client.write_error = APIError(403, "forbidden")

    mutations.delete_record(Collection.CLIENTS, 1)
    await mutations.drain()

    assert store.get(Collection.CLIENTS) == [{"id": 2}]


@pytest.mark.asyncio
async def test_delete_failure_reinserts_at_old_position_under_revert_policy(store, client, reverting):
    store.replace_all(Collection.CLIENTS, [{"id": 1}, {"id": 2}, {"id": 3}])
    client.write_error = APIError(403, "forbidden")

    reverting.delete_record(Collection.CLIENTS, 2)
    await reverting.drain()

    assert store.get(Collection.CLIENTS) == [{"id": 1}, {"id": 2}, {"id": 3}]


@pytest.mark.asyncio
async def test_bulk_update_and_delete(store, client, mutations):
    store.replace_all(Collection.PROJECTS, [{"id": 1, "status": "open"}, {"id": 2, "status": "open"}, {"id": 3}])

    assert mutations.bulk_update(Collection.PROJECTS, [1, 2, 99], {"status": "closed"}) == 2
    assert mutations.bulk_delete(Collection.PROJECTS, [3]) == 1
    await mutations.drain()

    assert store.get(Collection.PROJECTS) == [{"id": 1, "status": "closed"}, {"id": 2, "status": "closed"}]
    assert len(mutations.results) == 4


@pytest.mark.asyncio
async def test_bulk_duplicate_copies_with_suffix(store, client, mutations):
    store.replace_all(Collection.TASKS, [{"id": 1, "title": "Rack build", "priority": "high"}])

    copies = mutations.bulk_duplicate(Collection.TASKS, [1, 404])
    await mutations.drain()

    assert len(copies) == 1
    assert copies[0]["title"] == "Rack build (Copy)"
    assert client.calls == [("create", Collection.TASKS, {"title": "Rack build (Copy)", "priority": "high"})]
    assert len(store.get(Collection.TASKS)) == 2


def test_mutation_outside_event_loop_raises_before_touching_cache(store, client):
    mutations = OptimisticMutations(store, client)

    with pytest.raises(RuntimeError):
        mutations.create_record(Collection.CLIENTS, {"name": "Initech"})

    assert store.get(Collection.CLIENTS) == []
