"""Graph change classification and search index dispatch."""
from graphsync.indexing.classifier import ChangeClassifier
from graphsync.indexing.dispatcher import BulkDispatcher
from graphsync.indexing.errors import (
    BulkWriteFailed,
    DuplicateIndexDefinition,
    GraphSyncError,
    IndexingDisabledError,
    ReindexFailed,
    SearchTransportError,
    SpecParseError,
)
from graphsync.indexing.hooks import SyncListener
from graphsync.indexing.reindex import Reindexer
from graphsync.indexing.spec import IndexDefinition, IndexSpecMapping, parse_index_spec
from graphsync.indexing.types import (
    ChangeSet,
    DeleteAction,
    DocumentActionKey,
    DocumentOptions,
    GraphNode,
    LabelEntry,
    PendingActionSet,
    PropertyEntry,
    ReindexResult,
    SyncConfig,
    UpsertAction,
)
from graphsync.indexing.values import Duration, GeoPoint, normalize_value

__all__ = [
    "BulkDispatcher",
    "BulkWriteFailed",
    "ChangeClassifier",
    "ChangeSet",
    "DeleteAction",
    "DocumentActionKey",
    "DocumentOptions",
    "DuplicateIndexDefinition",
    "Duration",
    "GeoPoint",
    "GraphNode",
    "GraphSyncError",
    "IndexDefinition",
    "IndexSpecMapping",
    "IndexingDisabledError",
    "LabelEntry",
    "PendingActionSet",
    "PropertyEntry",
    "ReindexFailed",
    "ReindexResult",
    "Reindexer",
    "SearchTransportError",
    "SpecParseError",
    "SyncConfig",
    "SyncListener",
    "UpsertAction",
    "normalize_value",
    "parse_index_spec",
]
