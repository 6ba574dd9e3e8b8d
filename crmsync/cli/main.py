"""Main CLI entry point for crmsync."""

from typing import Annotated

import typer

from crmsync.cli.commands.list import list_records
from crmsync.cli.commands.maintenance import clear, seed
from crmsync.cli.commands.records import create_record, delete_record, update_record
from crmsync.cli.commands.status import status
from crmsync.cli.commands.sync import sync_now, watch
from crmsync.cli.utils.runtime import configure_logging, console
from crmsync.config import load_config
from crmsync.core.constants import PACKAGE_VERSION
from crmsync.exceptions import ConfigurationError

app = typer.Typer(
    name="crmsync",
    help="Local-first cache of CRM workspaces, clients, projects, tasks and employees",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"crmsync {PACKAGE_VERSION}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = False,
) -> None:
    """
    crmsync CLI
    """
    configure_logging(verbose)

    try:
        load_config()
    except ConfigurationError as e:
        console.print(f"[red]✗ {e}[/red] [dim](check your CRMSYNC_* environment variables or .env file)[/dim]")
        raise typer.Exit(2) from None


app.command("sync", help="Fetch every collection from the server and update the cache")(sync_now)
app.command("status", help="Show last sync time, staleness and cached record counts")(status)
app.command("list", help="List cached records of a collection")(list_records)
app.command("create", help="Add a record locally and send it to the server")(create_record)
app.command("update", help="Patch a record locally and send the change to the server")(update_record)
app.command("delete", help="Delete a record locally and on the server")(delete_record)
app.command("watch", help="Run the background sync loop and print cache changes")(watch)
app.command("seed", help="Fill empty workspaces and clients with starter records")(seed)
app.command("clear", help="Clear the local cache")(clear)


if __name__ == "__main__":
    app()
