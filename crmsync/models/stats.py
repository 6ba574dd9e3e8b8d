"""Sync and mutation outcome models."""

from typing import Literal

from pydantic import BaseModel, Field


class SyncReport(BaseModel):
    """Outcome of one fetch-compare-replace cycle."""

    started_at: float
    finished_at: float | None = None
    updated: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)  # collection -> error message
    last_sync: str | None = None

    @property
    def ok(self) -> bool:
        """True when every collection was fetched."""
        return not self.failed

    @property
    def any_succeeded(self) -> bool:
        return bool(self.updated or self.unchanged)


class MutationResult(BaseModel):
    """Outcome of the server request behind one optimistic mutation."""

    collection: str
    operation: Literal["create", "update", "delete"]
    record_id: str
    success: bool
    error: str | None = None
    reverted: bool = False
    server_id: str | None = None
