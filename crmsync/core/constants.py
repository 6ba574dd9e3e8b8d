"""
Constants and configuration values for the CRM local sync cache.
"""

from enum import IntEnum, StrEnum

from crmsync.exceptions import UnknownCollectionError

# API Base URL
DEFAULT_API_BASE_URL = "http://localhost:5000"

# Durable storage
DEFAULT_STORAGE_KEY = "crm_local_data"

# Version
PACKAGE_VERSION = "0.1.0"


class Collection(StrEnum):
    """Server-owned collections mirrored by the local cache."""

    WORKSPACES = "workspaces"
    CLIENTS = "clients"
    PROJECTS = "projects"
    TASKS = "tasks"
    EMPLOYEES = "employees"
    TASK_ASSIGNMENTS = "taskAssignments"

    @classmethod
    def parse(cls, name: "str | Collection") -> "Collection":
        """Resolve a collection from its wire name or a snake_case spelling."""
        if isinstance(name, Collection):
            return name
        for collection in cls:
            if name in (collection.value, collection.name.lower()):
                return collection
        raise UnknownCollectionError(str(name))


# REST endpoint for each collection (read, create, and /{id} for update/delete)
COLLECTION_ENDPOINTS: dict[Collection, str] = {
    Collection.WORKSPACES: "/api/workspaces",
    Collection.CLIENTS: "/api/clients",
    Collection.PROJECTS: "/api/projects",
    Collection.TASKS: "/api/tasks",
    Collection.EMPLOYEES: "/api/employees",
    Collection.TASK_ASSIGNMENTS: "/api/task_assignments",
}


class ConflictPolicy(StrEnum):
    """What to do with an optimistic local change when the server rejects it."""

    KEEP_LOCAL_ON_FAILURE = "keep-local"
    REVERT_ON_FAILURE = "revert"


class APIConstants(IntEnum):
    """API-related limits and constants."""

    REQUEST_TIMEOUT = 30
    BACKOFF_MAX_TRIES = 3
    BACKOFF_FACTOR = 2
    BACKOFF_MAX_VALUE = 30


class SyncConstants(IntEnum):
    """Sync loop timing."""

    DEFAULT_SYNC_INTERVAL_MINUTES = 5
    SECONDS_PER_MINUTE = 60


class DisplayConstants(IntEnum):
    """Display and formatting limits."""

    MAX_CELL_LENGTH = 40
    MAX_TABLE_COLUMNS = 8


class FormattingConstants(IntEnum):
    """Formatting constants."""

    JSON_INDENT = 2
