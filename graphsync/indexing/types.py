"""Type definitions shared by the classifier, dispatcher and re-index job."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Hashable, Literal, Mapping, Protocol, Union, runtime_checkable

from graphsync.indexing.spec import EMPTY_MAPPING, IndexSpecMapping

DEFAULT_DOC_TYPE = "_doc"
DEFAULT_REINDEX_BATCH_SIZE = 500

ActionOp = Literal["upsert", "delete"]


@runtime_checkable
class NodeView(Protocol):
    """Read-only view of a graph node supplied by the host."""

    def identity(self) -> Hashable:
        """Stable node id that document ids are derived from.

        Neo4j-backed views report the driver's `element_id`. Commit hooks and
        re-index scans must agree on it for the same node.
        """

    def labels(self) -> frozenset[str]: ...

    def has_property(self, name: str) -> bool: ...

    def get_property(self, name: str, default: Any = None) -> Any: ...


@dataclass(frozen=True)
class GraphNode:
    """In-memory node snapshot (labels and properties as of the read)."""

    node_id: Hashable
    node_labels: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)

    def identity(self) -> Hashable:
        return self.node_id

    def labels(self) -> frozenset[str]:
        return frozenset(self.node_labels)

    def label_list(self) -> list[str]:
        return list(dict.fromkeys(self.node_labels))

    def has_property(self, name: str) -> bool:
        return name in self.properties

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)


def label_list(node: NodeView) -> list[str]:
    """Labels of a node as a list, in the node's own order when it has one."""
    ordered = getattr(node, "label_list", None)
    if callable(ordered):
        return list(ordered())
    return sorted(node.labels())


@dataclass(frozen=True)
class LabelEntry:
    node: NodeView
    label: str


@dataclass(frozen=True)
class PropertyEntry:
    node: NodeView
    key: str


@dataclass(frozen=True)
class ChangeSet:
    """One transaction's changes, as delivered by the host's commit hook."""

    created_nodes: tuple[NodeView, ...] = ()
    deleted_nodes: tuple[NodeView, ...] = ()
    assigned_labels: tuple[LabelEntry, ...] = ()
    removed_labels: tuple[LabelEntry, ...] = ()
    assigned_properties: tuple[PropertyEntry, ...] = ()
    removed_properties: tuple[PropertyEntry, ...] = ()

    @cached_property
    def deleted_ids(self) -> frozenset:
        return frozenset(node.identity() for node in self.deleted_nodes)

    def is_deleted(self, node: NodeView) -> bool:
        return node.identity() in self.deleted_ids

    def is_empty(self) -> bool:
        return not (
            self.created_nodes
            or self.deleted_nodes
            or self.assigned_labels
            or self.removed_labels
            or self.assigned_properties
            or self.removed_properties
        )


@dataclass(frozen=True)
class DocumentActionKey:
    """Deduplication key: at most one action per document per commit."""

    scope: str | None
    index_name: str
    document_id: str

    def __str__(self) -> str:
        return f"IndexId [dbName={self.scope}, indexName={self.index_name}, id={self.document_id}]"


@dataclass(frozen=True)
class UpsertAction:
    key: DocumentActionKey
    doc_type: str
    body: dict[str, Any]

    op: ActionOp = field(default="upsert", init=False)


@dataclass(frozen=True)
class DeleteAction:
    key: DocumentActionKey
    doc_type: str

    op: ActionOp = field(default="delete", init=False)


DocumentAction = Union[UpsertAction, DeleteAction]

PendingActionSet = dict[DocumentActionKey, DocumentAction]


@dataclass(frozen=True)
class DocumentOptions:
    """Per-deployment knobs for document construction."""

    database: str | None = None
    scope_document_ids: bool = True
    include_id: bool = True
    include_labels: bool = True
    include_db: bool = False
    use_type: bool = False


@dataclass(frozen=True)
class SyncConfig:
    """Immutable snapshot of everything classification and dispatch need.

    Replaced wholesale on reconfiguration, never mutated.
    """

    mapping: IndexSpecMapping = field(default_factory=lambda: EMPTY_MAPPING)
    options: DocumentOptions = field(default_factory=DocumentOptions)
    asynchronous: bool = True
    reindex_batch_size: int = DEFAULT_REINDEX_BATCH_SIZE
    reindex_asynchronous: bool = False

    @property
    def enabled(self) -> bool:
        return bool(self.mapping)


@dataclass(frozen=True)
class ReindexResult:
    """Outcome of a re-index job: batches flushed and nodes visited."""

    number_of_batches: int
    number_of_indexed_document: int
