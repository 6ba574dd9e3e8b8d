"""Core functionality module."""

from crmsync.core.constants import COLLECTION_ENDPOINTS, Collection, ConflictPolicy, FormattingConstants

__all__ = [
    "COLLECTION_ENDPOINTS",
    "Collection",
    "ConflictPolicy",
    "FormattingConstants",
]
