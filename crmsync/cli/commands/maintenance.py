"""Seed and clear command implementations."""

import typer
from rich.console import Console

from crmsync.cli.utils.options import YES_OPTION
from crmsync.cli.utils.runtime import build_store
from crmsync.sync.fallback import seed_fallback_data

console = Console()


def seed() -> None:
    """Fill empty workspaces and clients with starter records."""
    with build_store() as store:
        seeded = seed_fallback_data(store)
    if seeded:
        console.print(f"[green]✓ Seeded {', '.join(seeded)}[/green]")
    else:
        console.print("[dim]Workspaces and clients already hold records; nothing seeded.[/dim]")


def clear(yes: YES_OPTION = False) -> None:
    """Delete every cached record and the sync metadata."""
    if not yes and not typer.confirm("Clear the local cache?", default=False):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(1)

    with build_store() as store:
        store.clear()
    console.print("[green]✓ Local cache cleared[/green]")
