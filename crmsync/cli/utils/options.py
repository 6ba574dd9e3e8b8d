"""Shared CLI options and enums for commands."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer


class OutputFormat(StrEnum):
    """Supported output formats across commands."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


COLLECTION_ARGUMENT = Annotated[
    str,
    typer.Argument(
        help="Collection name (workspaces, clients, projects, tasks, employees, taskAssignments)",
        show_default=False,
    ),
]

RECORD_ID_ARGUMENT = Annotated[
    str,
    typer.Argument(help="Record id", show_default=False),
]

JSON_DATA_ARGUMENT = Annotated[
    str,
    typer.Argument(help='Record fields as a JSON object, e.g. \'{"name": "Acme"}\'', show_default=False),
]

OUTPUT_PATH_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file path (prints to stdout when omitted)",
    ),
]

OUTPUT_FORMAT_OPTION = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format (table, json, csv)",
        case_sensitive=False,
    ),
]


YES_OPTION = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
]
