"""Snapshot and sync-status models for the local cache."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from crmsync.core.constants import Collection, SyncConstants

# Attribute holding each collection on LocalData
_FIELD_BY_COLLECTION: dict[Collection, str] = {
    Collection.WORKSPACES: "workspaces",
    Collection.CLIENTS: "clients",
    Collection.PROJECTS: "projects",
    Collection.TASKS: "tasks",
    Collection.EMPLOYEES: "employees",
    Collection.TASK_ASSIGNMENTS: "task_assignments",
}


class LocalData(BaseModel):
    """Latest known copy of every server-owned collection plus sync metadata.

    Serialized by alias, so the stored JSON keeps the camelCase layout
    ``{workspaces, ..., taskAssignments, lastSync, syncIntervalMinutes}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    workspaces: list[dict[str, Any]] = Field(default_factory=list)
    clients: list[dict[str, Any]] = Field(default_factory=list)
    projects: list[dict[str, Any]] = Field(default_factory=list)
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    employees: list[dict[str, Any]] = Field(default_factory=list)
    task_assignments: list[dict[str, Any]] = Field(default_factory=list, alias="taskAssignments")
    last_sync: str = Field(default="", alias="lastSync")  # ISO-8601, "" if never synced
    sync_interval_minutes: int = Field(
        default=int(SyncConstants.DEFAULT_SYNC_INTERVAL_MINUTES), alias="syncIntervalMinutes", gt=0
    )

    def records(self, collection: Collection) -> list[dict[str, Any]]:
        """Return the live record list for a collection."""
        return getattr(self, _FIELD_BY_COLLECTION[collection])

    def set_records(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        """Replace the record list for a collection."""
        setattr(self, _FIELD_BY_COLLECTION[collection], records)

    def counts(self) -> dict[str, int]:
        """Number of cached records per collection."""
        return {collection.value: len(self.records(collection)) for collection in Collection}


class SyncStatus(BaseModel):
    """Staleness information exposed to the CLI and other callers."""

    last_sync: str = ""
    last_sync_label: str = "Never"
    is_stale: bool = True
    sync_interval_minutes: int = int(SyncConstants.DEFAULT_SYNC_INTERVAL_MINUTES)
