"""Create, update and delete command implementations."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import typer
from rich.console import Console

from crmsync.cache.local_store import LocalStore
from crmsync.cli.utils.options import COLLECTION_ARGUMENT, JSON_DATA_ARGUMENT, RECORD_ID_ARGUMENT
from crmsync.cli.utils.runtime import build_client, build_store, parse_json_object, resolve_collection
from crmsync.config import load_config
from crmsync.models.stats import MutationResult
from crmsync.sync.mutations import OptimisticMutations

console = Console()
logger = logging.getLogger(__name__)


def _run_mutation(apply: Callable[[OptimisticMutations], Any]) -> tuple[Any, list[MutationResult]]:
    """Apply one optimistic mutation, then wait for the server to answer."""
    config = load_config()

    async def _mutate(store: LocalStore) -> tuple[Any, list[MutationResult]]:
        with build_client(config) as client:
            mutations = OptimisticMutations(store, client, policy=config.conflict_policy)
            outcome = apply(mutations)
            with console.status("[bold blue]Waiting for server...[/bold blue]", spinner="dots"):
                results = await mutations.drain()
            return outcome, results

    with build_store(config) as store:
        return asyncio.run(_mutate(store))


def _report(results: list[MutationResult]) -> None:
    for result in results:
        if result.success:
            suffix = f" (server id {result.server_id})" if result.server_id else ""
            console.print(f"[green]✓ Server confirmed {result.operation}{suffix}[/green]")
        elif result.reverted:
            console.print(f"[red]✗ Server rejected {result.operation}, local change reverted:[/red] {result.error}")
        else:
            console.print(f"[yellow]⚠ Server rejected {result.operation}, local change kept:[/yellow] {result.error}")
            console.print("[dim]The next 'crmsync sync' will replace it with the server's data.[/dim]")

    if any(not r.success for r in results):
        raise typer.Exit(1)


def create_record(
    collection: COLLECTION_ARGUMENT,
    data: JSON_DATA_ARGUMENT,
) -> None:
    """Add a record to the local cache and send it to the server."""
    resolved = resolve_collection(collection)
    draft = parse_json_object(data)

    record, results = _run_mutation(lambda m: m.create_record(resolved, draft))
    console.print(f"[green]✓ Added {resolved} record[/green] (temporary id {record['id']})")
    _report(results)


def update_record(
    collection: COLLECTION_ARGUMENT,
    record_id: RECORD_ID_ARGUMENT,
    data: JSON_DATA_ARGUMENT,
) -> None:
    """Patch a cached record and send the change to the server."""
    resolved = resolve_collection(collection)
    patch = parse_json_object(data)

    applied, results = _run_mutation(lambda m: m.update_record(resolved, record_id, patch))
    if applied:
        console.print(f"[green]✓ Updated {resolved} record {record_id}[/green]")
    else:
        console.print(f"[yellow]Record {record_id} is not cached; sent the update to the server only[/yellow]")
    _report(results)


def delete_record(
    collection: COLLECTION_ARGUMENT,
    record_id: RECORD_ID_ARGUMENT,
) -> None:
    """Remove a cached record and delete it on the server."""
    resolved = resolve_collection(collection)

    removed, results = _run_mutation(lambda m: m.delete_record(resolved, record_id))
    if removed:
        console.print(f"[green]✓ Deleted {resolved} record {record_id}[/green]")
    else:
        console.print(f"[yellow]Record {record_id} is not cached; sent the delete to the server only[/yellow]")
    _report(results)
