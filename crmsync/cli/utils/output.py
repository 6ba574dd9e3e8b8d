"""Shared output handlers for CLI commands."""

import csv
import io
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from crmsync.core.constants import DisplayConstants, FormattingConstants

console = Console()


def _cell(value: Any) -> str:
    """Render a value for CSV or table output, flattening nested objects."""
    if value is None:
        return ""
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)


def _write(content: str, output_path: Path | None) -> None:
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Saved to:[/bold green] {output_path}")
    else:
        print(content)


def record_fieldnames(records: list[dict[str, Any]]) -> list[str]:
    """All keys across ``records``, ``id`` first and the rest sorted."""
    keys: set[str] = set()
    for record in records:
        keys.update(record.keys())
    keys.discard("id")
    return ["id", *sorted(keys)]


def handle_json_output(data: Any, output_path: Path | None) -> None:
    """Handle JSON format output.

    Args:
        data: JSON-serializable data
        output_path: Optional file path to save output
    """
    json_content = json.dumps(data, indent=FormattingConstants.JSON_INDENT, default=str)
    _write(json_content, output_path)


def handle_csv_output(records: list[dict[str, Any]], output_path: Path | None) -> None:
    """Handle CSV format output.

    Args:
        records: Records to write, one row each
        output_path: Optional file path to save output
    """
    string_buffer = io.StringIO()

    if records:
        fieldnames = record_fieldnames(records)
        writer = csv.DictWriter(string_buffer, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            writer.writerow({key: _cell(record.get(key)) for key in fieldnames})

    _write(string_buffer.getvalue(), output_path)


def handle_table_output(records: list[dict[str, Any]], title: str) -> None:
    """Print records as a rich table, truncating wide records and long cells."""
    table = Table(title=title, show_lines=False, expand=True)
    fieldnames = record_fieldnames(records)[: DisplayConstants.MAX_TABLE_COLUMNS]
    for name in fieldnames:
        table.add_column(name, style="cyan" if name == "id" else None, overflow="fold")

    for record in records:
        row = []
        for name in fieldnames:
            text = _cell(record.get(name))
            if len(text) > DisplayConstants.MAX_CELL_LENGTH:
                text = text[: DisplayConstants.MAX_CELL_LENGTH - 1] + "…"
            row.append(text)
        table.add_row(*row)

    console.print(table)
