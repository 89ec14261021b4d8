"""Graph-to-search sync domain errors."""
from __future__ import annotations

from typing import Any


class GraphSyncError(RuntimeError):
    """Base error for graph-to-search synchronisation."""


class SpecParseError(GraphSyncError):
    """Raised when the index specification declares the same label twice."""

    def __init__(self, entry: str) -> None:
        super().__init__(f"duplicate index definition for label: {entry}")
        self.entry = entry


# Name used by callers that think of it as a duplicate declaration rather than a parse failure.
DuplicateIndexDefinition = SpecParseError


class BulkWriteFailed(GraphSyncError):
    """Raised when the search engine accepted the bulk request but reported item failures."""

    def __init__(self, payload: Any, message: str | None = None) -> None:
        super().__init__(message or f"Fail to perform bulk action : {payload}")
        self.payload = payload


class SearchTransportError(GraphSyncError):
    """Raised when the search engine could not be reached."""


class ReindexFailed(GraphSyncError):
    """Raised when a re-index job aborts."""


class IndexingDisabledError(GraphSyncError):
    """Raised when indexing is disabled (no or invalid index specification)."""
