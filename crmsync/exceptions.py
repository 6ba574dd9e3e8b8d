"""Custom exceptions for the CRM local sync cache."""

from typing import Any


class CRMSyncError(Exception):
    """Base exception for all crmsync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize crmsync error.

        Args:
            message: Error message
            details: Additional error details

        """
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(CRMSyncError):
    """Raised when configuration is invalid or missing."""


class APIError(CRMSyncError):
    """Base class for API-related errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_text: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            status_code: HTTP status code
            message: Error message
            response_text: Raw response text from API
            details: Additional error details

        """
        super().__init__(message, details)
        self.status_code = status_code
        self.response_text = response_text


class AuthenticationError(APIError):
    """Raised when authentication fails (401)."""

    def __init__(self, message: str = "Authentication failed", response_text: str | None = None) -> None:
        super().__init__(401, message, response_text)


class PermissionError(APIError):
    """Raised when access is forbidden (403)."""

    def __init__(self, message: str = "Access forbidden", response_text: str | None = None) -> None:
        super().__init__(403, message, response_text)


class NotFoundError(APIError):
    """Raised when resource is not found (404)."""

    def __init__(self, message: str = "Resource not found", response_text: str | None = None) -> None:
        super().__init__(404, message, response_text)


class RateLimitError(APIError):
    """Raised when rate limit is exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        response_text: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(429, message, response_text)
        self.retry_after = retry_after


class ResponseFormatError(CRMSyncError):
    """Raised when a server response does not have the shape the cache needs."""

    def __init__(self, endpoint: str, message: str) -> None:
        super().__init__(message, {"endpoint": endpoint})
        self.endpoint = endpoint


class ValidationError(CRMSyncError):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class UnknownCollectionError(ValidationError):
    """Raised when a collection name is not one of the tracked collections."""

    def __init__(self, name: str) -> None:
        super().__init__("collection", name, f"Unknown collection '{name}'")
        self.name = name


class StorageError(CRMSyncError):
    """Raised when durable storage cannot be read or written."""


class TimeoutError(CRMSyncError):
    """Raised when operation times out."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        message = f"Operation '{operation}' timed out after {timeout_seconds} seconds"
        super().__init__(message, {"operation": operation, "timeout_seconds": timeout_seconds})
        self.operation = operation
        self.timeout_seconds = timeout_seconds
