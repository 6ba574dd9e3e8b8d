from __future__ import annotations

import asyncio

import pytest

from crmsync.core.constants import Collection
from crmsync.exceptions import APIError
from crmsync.sync.background import BackgroundSync
from crmsync.sync.staleness import parse_timestamp

CLIENTS = [{"id": 1, "name": "Acme"}, {"id": 2, "name": "Globex"}]
PROJECTS = [{"id": 10, "name": "Showroom AV", "clientId": 1}]


@pytest.mark.asyncio
async def test_sync_replaces_changed_collections(store, client, notifications):
    client.responses = {Collection.CLIENTS: CLIENTS, Collection.PROJECTS: PROJECTS}
    engine = BackgroundSync(store, client)

    report = await engine.sync_once()

    assert store.get(Collection.CLIENTS) == CLIENTS
    assert store.get(Collection.PROJECTS) == PROJECTS
    assert sorted(report.updated) == ["clients", "projects"]
    assert len(report.unchanged) == 4
    assert report.ok
    assert len(notifications) == 2
    assert sorted(client.list_calls()) == sorted(Collection)


@pytest.mark.asyncio
async def test_sync_skips_replace_when_data_is_equal(store, client, notifications):
    store.replace_all(Collection.CLIENTS, CLIENTS)
    notifications.clear()
    client.responses = {Collection.CLIENTS: CLIENTS}
    engine = BackgroundSync(store, client)

    report = await engine.sync_once()

    assert report.updated == []
    assert notifications == []


@pytest.mark.asyncio
async def test_equality_ignores_key_order(store, client, notifications):
    store.replace_all(Collection.CLIENTS, [{"name": "Acme", "id": 1}])
    notifications.clear()
    client.responses = {Collection.CLIENTS: [{"id": 1, "name": "Acme"}]}

    await BackgroundSync(store, client, collections=[Collection.CLIENTS]).sync_once()

    assert notifications == []


@pytest.mark.asyncio
async def test_failed_collection_keeps_cached_data(store, client):
    store.replace_all(Collection.TASKS, [{"id": 1, "title": "Pull cable"}])
    client.responses = {
        Collection.TASKS: APIError(500, "Server error in GET /api/tasks"),
        Collection.CLIENTS: CLIENTS,
    }
    engine = BackgroundSync(store, client)

    report = await engine.sync_once()

    assert store.get(Collection.TASKS) == [{"id": 1, "title": "Pull cable"}]
    assert store.get(Collection.CLIENTS) == CLIENTS
    assert "tasks" in report.failed
    assert not report.ok


@pytest.mark.asyncio
async def test_plain_sync_does_not_stamp_last_sync(store, client):
    await BackgroundSync(store, client).sync_once()

    assert store.last_sync == ""


@pytest.mark.asyncio
async def test_force_sync_stamps_last_sync_on_partial_success(store, client):
    client.responses = {Collection.EMPLOYEES: ConnectionError("offline")}
    engine = BackgroundSync(store, client)

    report = await engine.force_sync_now()

    assert report.last_sync == store.last_sync
    assert parse_timestamp(store.last_sync) is not None
    assert engine.is_stale() is False
    assert engine.status().last_sync_label == "Just now"


@pytest.mark.asyncio
async def test_force_sync_with_every_fetch_failing_leaves_last_sync(store, client):
    client.responses = {collection: ConnectionError("offline") for collection in Collection}
    engine = BackgroundSync(store, client)

    report = await engine.force_sync_now()

    assert len(report.failed) == len(Collection)
    assert store.last_sync == ""
    assert engine.is_stale() is True


@pytest.mark.asyncio
async def test_tracked_collections_limit_fetches(store, client):
    engine = BackgroundSync(store, client, collections=["workspaces", Collection.EMPLOYEES])

    await engine.sync_once()

    assert sorted(client.list_calls()) == [Collection.EMPLOYEES, Collection.WORKSPACES]


@pytest.mark.asyncio
async def test_background_loop_runs_until_stopped(store, client):
    client.responses = {Collection.CLIENTS: CLIENTS}
    engine = BackgroundSync(store, client, collections=[Collection.CLIENTS], interval_seconds=0.01)

    await engine.start()
    assert engine.running
    await asyncio.sleep(0.1)
    await engine.stop()

    assert not engine.running
    assert len(client.list_calls()) >= 2
    assert store.get(Collection.CLIENTS) == CLIENTS
    assert store.last_sync != ""

    calls_after_stop = len(client.list_calls())
    await asyncio.sleep(0.05)
    assert len(client.list_calls()) == calls_after_stop


@pytest.mark.asyncio
async def test_start_twice_keeps_single_loop(store, client):
    engine = BackgroundSync(store, client, interval_seconds=60)

    await engine.start()
    first_task = engine._task
    await engine.start()

    assert engine._task is first_task
    await engine.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop(store, client):
    await BackgroundSync(store, client).stop()
