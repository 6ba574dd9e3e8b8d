"""Sync and watch command implementations."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from crmsync.cache.local_store import LocalStore
from crmsync.cli.utils.runtime import build_client, build_store
from crmsync.core.constants import Collection
from crmsync.models.snapshot import LocalData
from crmsync.models.stats import SyncReport
from crmsync.sync.background import BackgroundSync
from crmsync.sync.staleness import format_last_sync

console = Console()
logger = logging.getLogger(__name__)


def _print_report(report: SyncReport) -> None:
    table = Table(title="Sync result", show_lines=False)
    table.add_column("Collection", style="cyan")
    table.add_column("Result")
    for collection in Collection:
        name = collection.value
        if name in report.updated:
            table.add_row(name, "[green]updated[/green]")
        elif name in report.unchanged:
            table.add_row(name, "[dim]unchanged[/dim]")
        elif name in report.failed:
            table.add_row(name, f"[red]failed[/red] [dim]{report.failed[name]}[/dim]")
    console.print(table)


def sync_now() -> None:
    """Fetch every collection from the server now and update the local cache.

    Collections whose server copy equals the cached copy are left untouched.
    A collection that fails to fetch keeps its cached data.
    """

    async def _sync(store: LocalStore) -> SyncReport:
        with build_client() as client:
            engine = BackgroundSync(store, client)
            with console.status("[bold blue]Syncing with server...[/bold blue]", spinner="dots"):
                return await engine.force_sync_now()

    with build_store() as store:
        report = asyncio.run(_sync(store))
        last_sync = store.last_sync
    _print_report(report)

    if report.ok:
        console.print(f"[green]✓ Sync complete[/green] | last sync {format_last_sync(last_sync)}")
    elif report.any_succeeded:
        console.print(f"[yellow]⚠ Partial sync: {len(report.failed)} collection(s) failed[/yellow]")
    else:
        console.print("[red]✗ Sync failed for every collection; cached data kept[/red]")
        raise typer.Exit(1)


def watch(
    duration: Annotated[
        float | None,
        typer.Option(
            "--duration",
            "-d",
            help="Stop after this many seconds (runs until interrupted when omitted)",
        ),
    ] = None,
    interval: Annotated[
        int | None,
        typer.Option(
            "--interval",
            "-i",
            help="Change the stored sync interval (minutes) before starting",
            min=1,
        ),
    ] = None,
) -> None:
    """Run the background sync loop and print a line whenever the cache changes."""

    def _on_change(snapshot: LocalData) -> None:
        counts = ", ".join(f"{name}={count}" for name, count in snapshot.counts().items())
        console.print(f"[dim]{format_last_sync(snapshot.last_sync)}[/dim] {counts}")

    async def _watch(store: LocalStore) -> None:
        with build_client() as client:
            engine = BackgroundSync(store, client)
            unsubscribe = store.subscribe(_on_change)
            await engine.start()
            console.print(
                f"[bold blue]Watching[/bold blue] | sync every {store.sync_interval_minutes} min "
                "[dim](Ctrl+C to stop)[/dim]"
            )
            try:
                if duration is None:
                    await asyncio.Event().wait()
                else:
                    await asyncio.sleep(duration)
            finally:
                await engine.stop()
                unsubscribe()

    try:
        with build_store() as store:
            if interval:
                store.set_sync_interval(interval)
            asyncio.run(_watch(store))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
