"""Construction of the store and API client for CLI commands."""

import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from crmsync.api.client import CRMAPIClient
from crmsync.cache.local_store import LocalStore
from crmsync.cache.storage import DiskSnapshotStorage
from crmsync.config import Config, load_config
from crmsync.core.constants import Collection
from crmsync.exceptions import UnknownCollectionError

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Send log records through rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_store(config: Config | None = None) -> LocalStore:
    """Open the persisted local cache described by ``config``; use it with ``with`` to release it."""
    config = config or load_config()
    storage = DiskSnapshotStorage(config.cache_dir)
    return LocalStore(
        storage,
        storage_key=config.storage_key,
        default_sync_interval=config.sync_interval_minutes,
    )


def build_client(config: Config | None = None) -> CRMAPIClient:
    """Create an API client; open it with ``with`` before use."""
    config = config or load_config()
    return CRMAPIClient(
        base_url=config.api_base_url,
        api_token=config.api_token.get_secret_value() if config.api_token else None,
        timeout=config.request_timeout,
    )


def resolve_collection(name: str) -> Collection:
    """Parse a collection argument, exiting with a readable message if unknown."""
    try:
        return Collection.parse(name)
    except UnknownCollectionError as e:
        valid = ", ".join(c.value for c in Collection)
        console.print(f"[red]✗ {e}[/red] [dim](expected one of: {valid})[/dim]")
        raise typer.Exit(2) from None


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse a JSON object argument, exiting with a readable message if invalid."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON: {e}[/red]")
        raise typer.Exit(2) from None

    if not isinstance(data, dict):
        console.print("[red]✗ Expected a JSON object[/red]")
        raise typer.Exit(2)
    return data
