"""Transaction change classifier.

Turns one transaction's change set into a deduplicated set of document actions.
Event kinds are processed in a fixed order (created, deleted, assigned labels,
removed labels, assigned properties, removed properties); a later action for
the same document key replaces an earlier one.

Classification is pure and in-memory: no network I/O happens here.
"""
from __future__ import annotations

import logging

from graphsync.indexing.documents import (
    delete_actions_everywhere,
    delete_actions_for_label,
    index_actions,
)
from graphsync.indexing.spec import IndexSpecMapping
from graphsync.indexing.types import ChangeSet, NodeView, PendingActionSet, SyncConfig

logger = logging.getLogger(__name__)


def _has_indexed_label(node: NodeView, mapping: IndexSpecMapping) -> bool:
    return any(label in mapping for label in node.labels())


class ChangeClassifier:
    """Classify graph changes against one immutable sync configuration."""

    def __init__(self, config: SyncConfig) -> None:
        self.config = config

    def classify(self, changes: ChangeSet) -> PendingActionSet:
        mapping = self.config.mapping
        options = self.config.options
        actions: PendingActionSet = {}

        if not mapping or changes.is_empty():
            return actions

        for node in changes.created_nodes:
            if _has_indexed_label(node, mapping):
                actions.update(index_actions(node, mapping, options))

        # Labels of a deleted node can't be read reliably: delete from every configured index.
        for node in changes.deleted_nodes:
            actions.update(delete_actions_everywhere(node, mapping, options))

        for entry in changes.assigned_labels:
            if entry.label not in mapping:
                continue
            if changes.is_deleted(entry.node):
                actions.update(delete_actions_everywhere(entry.node, mapping, options))
            else:
                actions.update(index_actions(entry.node, mapping, options))

        for entry in changes.removed_labels:
            if entry.label in mapping:
                actions.update(delete_actions_for_label(entry.node, entry.label, mapping, options))

        for entry in changes.assigned_properties:
            if _has_indexed_label(entry.node, mapping):
                actions.update(index_actions(entry.node, mapping, options))

        for entry in changes.removed_properties:
            if changes.is_deleted(entry.node):
                continue
            if _has_indexed_label(entry.node, mapping):
                actions.update(index_actions(entry.node, mapping, options))

        logger.debug(
            "before commit: found %d action(s) to perform (database=%s)",
            len(actions),
            options.database,
        )
        return actions
