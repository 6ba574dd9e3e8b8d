"""Starter records shown before the first successful sync."""

import logging
from typing import Any

from crmsync.cache.local_store import LocalStore
from crmsync.core.constants import Collection
from crmsync.sync.staleness import utc_now_iso

logger = logging.getLogger(__name__)


def fallback_workspaces(timestamp: str) -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "name": "Development Team",
            "description": "Software development projects and tasks",
            "color": "#3B82F6",
            "createdBy": "admin",
            "createdAt": timestamp,
            "updatedAt": timestamp,
        },
        {
            "id": 2,
            "name": "Marketing",
            "description": "Marketing campaigns and content management",
            "color": "#10B981",
            "createdBy": "admin",
            "createdAt": timestamp,
            "updatedAt": timestamp,
        },
        {
            "id": 3,
            "name": "Client Work",
            "description": "Client projects and deliverables",
            "color": "#F59E0B",
            "createdBy": "admin",
            "createdAt": timestamp,
            "updatedAt": timestamp,
        },
    ]


def fallback_clients(timestamp: str) -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "name": "Audio Video Integrations",
            "company": "AVI",
            "email": "info@avicentral.com",
            "phone": "(555) 123-4567",
            "address": "123 Main St, City, State 12345",
            "status": "active",
            "createdAt": timestamp,
        },
        {
            "id": 2,
            "name": "Sample Client",
            "company": "Sample Corp",
            "email": "contact@sample.com",
            "phone": "(555) 987-6543",
            "address": "456 Oak Ave, City, State 67890",
            "status": "active",
            "createdAt": timestamp,
        },
    ]


def seed_fallback_data(store: LocalStore) -> list[str]:
    """Fill empty workspaces/clients with starter records.

    Collections that already hold records are left alone; the next sync
    replaces the starter records with the server's.

    Returns:
        Names of the collections that were seeded
    """
    timestamp = utc_now_iso()
    seeded = []
    for collection, factory in (
        (Collection.WORKSPACES, fallback_workspaces),
        (Collection.CLIENTS, fallback_clients),
    ):
        if not store.get(collection):
            store.replace_all(collection, factory(timestamp))
            seeded.append(collection.value)

    if seeded:
        logger.info(f"Seeded fallback data for {', '.join(seeded)}")
    return seeded
