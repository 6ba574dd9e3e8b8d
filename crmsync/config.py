"""Configuration management for crmsync."""

from pathlib import Path

from pydantic import Field, SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from crmsync.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_STORAGE_KEY,
    APIConstants,
    ConflictPolicy,
    SyncConstants,
)
from crmsync.exceptions import ConfigurationError


class Config(BaseSettings):
    """Application configuration."""

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        alias="CRMSYNC_API_BASE_URL",
        description="Base URL of the CRM REST API",
    )
    api_token: SecretStr | None = Field(
        default=None,
        alias="CRMSYNC_API_TOKEN",
        description="Bearer token sent with every API request",
    )
    request_timeout: float = Field(
        default=float(APIConstants.REQUEST_TIMEOUT),
        alias="CRMSYNC_REQUEST_TIMEOUT",
        gt=0,
        description="Per-request timeout in seconds",
    )

    # Local cache
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".crmsync" / "cache",
        alias="CRMSYNC_CACHE_DIR",
        description="Directory holding the durable snapshot",
    )
    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        alias="CRMSYNC_STORAGE_KEY",
        description="Key under which the snapshot is stored",
    )
    sync_interval_minutes: int = Field(
        default=int(SyncConstants.DEFAULT_SYNC_INTERVAL_MINUTES),
        alias="CRMSYNC_SYNC_INTERVAL_MINUTES",
        gt=0,
        description="Background sync interval used when the snapshot has none",
    )
    conflict_policy: ConflictPolicy = Field(
        default=ConflictPolicy.KEEP_LOCAL_ON_FAILURE,
        alias="CRMSYNC_CONFLICT_POLICY",
        description="Handling of optimistic changes the server rejects",
    )

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


def load_config() -> Config:
    """Load configuration from environment and .env file.

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    try:
        return Config()
    except PydanticValidationError as e:
        invalid = ", ".join(str(error["loc"][0]) for error in e.errors())
        raise ConfigurationError(f"Invalid configuration: {invalid}", {"errors": e.errors()}) from e
