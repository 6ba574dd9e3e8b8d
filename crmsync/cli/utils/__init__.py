"""CLI utilities module."""

from crmsync.cli.utils.options import (
    COLLECTION_ARGUMENT,
    JSON_DATA_ARGUMENT,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    RECORD_ID_ARGUMENT,
    YES_OPTION,
    OutputFormat,
)
from crmsync.cli.utils.output import handle_csv_output, handle_json_output, handle_table_output
from crmsync.cli.utils.runtime import (
    build_client,
    build_store,
    configure_logging,
    parse_json_object,
    resolve_collection,
)

__all__ = [
    "COLLECTION_ARGUMENT",
    "JSON_DATA_ARGUMENT",
    "OUTPUT_FORMAT_OPTION",
    "OUTPUT_PATH_OPTION",
    "RECORD_ID_ARGUMENT",
    "YES_OPTION",
    "OutputFormat",
    "build_client",
    "build_store",
    "configure_logging",
    "handle_csv_output",
    "handle_json_output",
    "handle_table_output",
    "parse_json_object",
    "resolve_collection",
]
