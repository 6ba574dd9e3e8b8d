"""Interface the sync layer expects from a collection API client."""

from typing import Any, Protocol

from crmsync.core.constants import Collection


class CollectionAPI(Protocol):
    """Read and write access to the server collections.

    Implemented by ``CRMAPIClient``; methods are blocking and are run off the
    event loop by the sync layer.
    """

    def list_records(self, collection: Collection) -> list[dict[str, Any]]: ...

    def create_record(self, collection: Collection, draft: dict[str, Any]) -> dict[str, Any]: ...

    def update_record(self, collection: Collection, record_id: str | int, patch: dict[str, Any]) -> Any: ...

    def delete_record(self, collection: Collection, record_id: str | int) -> None: ...
