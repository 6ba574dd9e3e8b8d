"""Status command implementation."""

from rich.console import Console
from rich.table import Table

from crmsync.cli.utils.runtime import build_store
from crmsync.sync.staleness import format_last_sync, is_stale

console = Console()


def status() -> None:
    """Show when the cache last synced, whether it is stale, and record counts."""
    with build_store() as store:
        snapshot = store.snapshot()

    stale = is_stale(snapshot.last_sync, snapshot.sync_interval_minutes)
    badge = "[red]Stale[/red]" if stale else "[green]Fresh[/green]"
    console.print(
        f"Sync: {format_last_sync(snapshot.last_sync)} | {badge} | "
        f"interval {snapshot.sync_interval_minutes} min"
    )
    if snapshot.last_sync:
        console.print(f"[dim]Last sync at {snapshot.last_sync}[/dim]")

    table = Table(title="Cached records", show_lines=False)
    table.add_column("Collection", style="cyan")
    table.add_column("Records", justify="right")
    for name, count in snapshot.counts().items():
        table.add_row(name, str(count))
    console.print(table)

    if stale:
        console.print("[dim]Run 'crmsync sync' to refresh the cache.[/dim]")
