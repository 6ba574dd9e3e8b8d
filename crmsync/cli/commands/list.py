"""List cached records command implementation."""

import logging

from rich.console import Console

from crmsync.cli.utils.options import COLLECTION_ARGUMENT, OUTPUT_FORMAT_OPTION, OUTPUT_PATH_OPTION, OutputFormat
from crmsync.cli.utils.output import handle_csv_output, handle_json_output, handle_table_output
from crmsync.cli.utils.runtime import build_store, resolve_collection
from crmsync.sync.staleness import format_last_sync

console = Console()
logger = logging.getLogger(__name__)


def list_records(
    collection: COLLECTION_ARGUMENT,
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
) -> None:
    """List the cached records of a collection (no server request)."""
    resolved = resolve_collection(collection)
    with build_store() as store:
        records = store.get(resolved)
        last_sync = store.last_sync

    if output_format == OutputFormat.JSON:
        handle_json_output(records, output)
    elif output_format == OutputFormat.CSV:
        handle_csv_output(records, output)
    else:
        if not records:
            console.print(f"[yellow]No cached {resolved}.[/yellow]")
            console.print("[dim]Run 'crmsync sync' to fetch data from the server.[/dim]")
            return
        handle_table_output(records, title=f"{resolved} ({len(records)})")
        console.print(f"[dim]Last sync: {format_last_sync(last_sync)}[/dim]")
