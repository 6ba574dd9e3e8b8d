"""CRM REST API client implementation."""

import logging
import threading
from typing import Any

import backoff
import requests

from crmsync.core.constants import COLLECTION_ENDPOINTS, DEFAULT_API_BASE_URL, APIConstants, Collection
from crmsync.exceptions import (
    APIError,
    AuthenticationError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ResponseFormatError,
    TimeoutError,
)


class CRMAPIClient:
    """Client for the per-collection read and write endpoints of the CRM server.

    Callers may use one client from several worker threads; requests on the
    shared session are serialized.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        api_token: str | None = None,
        timeout: float = APIConstants.REQUEST_TIMEOUT,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:5000``
            api_token: Optional bearer token sent with every request
            timeout: Per-request timeout in seconds
        """
        self.logger = logging.getLogger(__name__)

        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.session: requests.Session | None = None
        self._request_lock = threading.Lock()

        self.logger.debug(f"CRMAPIClient configured for {self.base_url}")

    def __enter__(self) -> "CRMAPIClient":
        """Enter context."""
        self.logger.info("Opening client session")
        self.session = requests.Session()
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context."""
        self.logger.info("Closing client session")
        if self.session:
            self.session.close()
            self.session = None
        else:
            self.logger.warning("No session to close")

    @property
    def headers(self) -> dict[str, str]:
        """Get request headers."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    @backoff.on_exception(
        backoff.expo,
        (requests.exceptions.ConnectionError,),
        max_tries=APIConstants.BACKOFF_MAX_TRIES,
        factor=APIConstants.BACKOFF_FACTOR,
        max_value=APIConstants.BACKOFF_MAX_VALUE,
    )
    def _make_request(
        self,
        method: str,
        endpoint: str,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            payload: JSON body

        Returns:
            Decoded JSON response, or None for an empty body

        """
        if not self.session:
            raise RuntimeError("Client not initialized. Use context manager.")

        url = f"{self.base_url}{endpoint}"
        method_name = f"{method} {endpoint}"

        self.logger.debug(f"Making request: {method_name}")

        try:
            with self._request_lock:
                response = self.session.request(method, url, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise TimeoutError(method_name, self.timeout) from None

        if 200 <= response.status_code < 300:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise ResponseFormatError(endpoint, f"Invalid JSON in {method_name}: {e}") from e

        response_text = response.text

        # Map status codes to exceptions
        error_map = {
            401: lambda: AuthenticationError(f"Unauthorized access in {method_name}", response_text),
            403: lambda: PermissionError(f"Access forbidden in {method_name}", response_text),
            404: lambda: NotFoundError(f"Resource not found in {method_name}", response_text),
            408: lambda: TimeoutError(method_name, self.timeout),
            429: lambda: RateLimitError(
                f"Rate limit exceeded in {method_name}",
                response_text,
                int(response.headers.get("Retry-After", 0)) if response.headers.get("Retry-After") else None,
            ),
        }

        # Check for specific error or server error
        if response.status_code in error_map:
            raise error_map[response.status_code]()
        elif 500 <= response.status_code < 600:
            raise APIError(response.status_code, f"Server error in {method_name}", response_text)
        else:
            raise APIError(
                response.status_code,
                f"Unexpected response status {response.status_code} in {method_name}",
                response_text,
            )

    @staticmethod
    def _extract_records(collection: Collection, endpoint: str, data: Any) -> list[dict[str, Any]]:
        """Unwrap a list response.

        The server answers either with a bare array or with an envelope such
        as ``{"success": true, "employees": [...]}``.
        """
        if isinstance(data, list):
            return data

        if isinstance(data, dict):
            if data.get("success") is False:
                raise ResponseFormatError(endpoint, f"Server reported failure: {data.get('error', 'unknown error')}")
            for key in (collection.value, "data"):
                if isinstance(data.get(key), list):
                    return data[key]

        raise ResponseFormatError(endpoint, f"Expected a list of {collection} records, got {type(data).__name__}")

    def list_records(self, collection: Collection) -> list[dict[str, Any]]:
        """Fetch every record of a collection.

        Returns:
            Records as returned by the server
        """
        endpoint = COLLECTION_ENDPOINTS[collection]
        data = self._make_request("GET", endpoint)
        records = self._extract_records(collection, endpoint, data)
        self.logger.debug(f"Fetched {len(records)} {collection}")
        return records

    def create_record(self, collection: Collection, draft: dict[str, Any]) -> dict[str, Any]:
        """Create a record and return the server's copy (carrying the real ``id``)."""
        endpoint = COLLECTION_ENDPOINTS[collection]
        data = self._make_request("POST", endpoint, payload=draft)

        # Some endpoints wrap the created record, e.g. {"success": true, "employee": {...}}
        if isinstance(data, dict) and "id" not in data:
            data = next((value for value in data.values() if isinstance(value, dict) and "id" in value), data)

        if not isinstance(data, dict) or "id" not in data:
            raise ResponseFormatError(endpoint, f"Create response for {collection} has no 'id'")
        self.logger.info(f"Created {collection} record {data['id']}")
        return data

    def update_record(self, collection: Collection, record_id: str | int, patch: dict[str, Any]) -> Any:
        """Apply a partial update to a record."""
        endpoint = f"{COLLECTION_ENDPOINTS[collection]}/{record_id}"
        data = self._make_request("PUT", endpoint, payload=patch)
        self.logger.info(f"Updated {collection} record {record_id}")
        return data

    def delete_record(self, collection: Collection, record_id: str | int) -> None:
        """Delete a record."""
        endpoint = f"{COLLECTION_ENDPOINTS[collection]}/{record_id}"
        self._make_request("DELETE", endpoint)
        self.logger.info(f"Deleted {collection} record {record_id}")
