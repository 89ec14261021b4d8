"""Document builder for search indexing.

Convention:
- doc_id = "{database}_{node identity}" when ids are scoped by database, else the bare identity.
- The same doc_id is used in every index a node feeds; only the index name varies.
- doc_type = "_doc", or the label name when label-as-type mapping is enabled.
"""
from __future__ import annotations

from typing import Any

from graphsync.indexing.spec import IndexDefinition, IndexSpecMapping
from graphsync.indexing.types import (
    DEFAULT_DOC_TYPE,
    DeleteAction,
    DocumentActionKey,
    DocumentOptions,
    NodeView,
    PendingActionSet,
    UpsertAction,
    label_list,
)
from graphsync.indexing.values import normalize_value


def document_id(node: NodeView, options: DocumentOptions) -> str:
    identity = str(node.identity())
    if options.database and options.scope_document_ids:
        return f"{options.database}_{identity}"
    return identity


def document_type(label: str, options: DocumentOptions) -> str:
    if options.use_type:
        return label
    return DEFAULT_DOC_TYPE


def action_key(node: NodeView, definition: IndexDefinition, options: DocumentOptions) -> DocumentActionKey:
    return DocumentActionKey(
        scope=options.database,
        index_name=definition.index_name,
        document_id=document_id(node, options),
    )


def should_delete(node: NodeView, definition: IndexDefinition) -> bool:
    """Whether the node carries none of the indexed properties.

    Such a node is absent from the index even though it still exists in the graph.
    """
    for prop in definition.properties:
        if node.get_property(prop, None) is not None:
            return False
    return True


def build_document(node: NodeView, definition: IndexDefinition, options: DocumentOptions) -> dict[str, Any]:
    """Build the document body: optional @-fields, then every declared property.

    Missing properties are written as explicit nulls so each declared field keeps its slot.
    """
    body: dict[str, Any] = {}

    if options.include_id:
        body["@id"] = str(node.identity())
    if options.include_labels:
        body["@labels"] = label_list(node)
    if options.include_db:
        body["@dbname"] = options.database

    for prop in definition.properties:
        if node.has_property(prop):
            body[prop] = normalize_value(node.get_property(prop))
        else:
            body[prop] = None
    return body


def index_actions(node: NodeView, mapping: IndexSpecMapping, options: DocumentOptions) -> PendingActionSet:
    """Upsert or delete the node in every index reachable from its current labels."""
    actions: PendingActionSet = {}
    for label in label_list(node):
        for definition in mapping.get(label, ()):
            key = action_key(node, definition, options)
            if should_delete(node, definition):
                actions[key] = DeleteAction(key=key, doc_type=document_type(label, options))
            else:
                actions[key] = UpsertAction(
                    key=key,
                    doc_type=document_type(label, options),
                    body=build_document(node, definition, options),
                )
    return actions


def delete_actions_for_label(
    node: NodeView,
    label: str,
    mapping: IndexSpecMapping,
    options: DocumentOptions,
) -> PendingActionSet:
    """Delete the node from the indices fed by one label only."""
    actions: PendingActionSet = {}
    for definition in mapping.get(label, ()):
        key = action_key(node, definition, options)
        actions[key] = DeleteAction(key=key, doc_type=document_type(label, options))
    return actions


def delete_actions_everywhere(node: NodeView, mapping: IndexSpecMapping, options: DocumentOptions) -> PendingActionSet:
    """Delete the node from every configured index.

    Used when the node's labels can no longer be read (deleted in this transaction).
    Deleting a document that does not exist is a no-op on the engine side.
    """
    actions: PendingActionSet = {}
    for label in mapping:
        actions.update(delete_actions_for_label(node, label, mapping, options))
    return actions
