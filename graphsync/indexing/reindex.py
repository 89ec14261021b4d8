"""Full re-index of graph nodes by label."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Protocol

from graphsync.indexing.dispatcher import BulkDispatcher
from graphsync.indexing.documents import index_actions
from graphsync.indexing.errors import ReindexFailed
from graphsync.indexing.spec import indexed_labels
from graphsync.indexing.types import NodeView, PendingActionSet, ReindexResult, SyncConfig

logger = logging.getLogger(__name__)


class NodeSource(Protocol):
    """Label-scoped node scan provided by the graph side."""

    def find_nodes(self, label: str, *, database: str | None = None) -> Iterator[NodeView]: ...

    def all_labels(self, *, database: str | None = None) -> list[str]: ...


class Reindexer:
    """Scan labelled nodes and push them to the index in batches.

    Every node seen here is live, so each one resolves to an upsert or (when it
    carries none of the indexed properties) a delete.
    """

    def __init__(self, config: SyncConfig, *, node_source: NodeSource, dispatcher: BulkDispatcher) -> None:
        self.config = config
        self.node_source = node_source
        self.dispatcher = dispatcher

    def run(
        self,
        labels: Iterable[str],
        *,
        batch_size: int | None = None,
        asynchronous: bool | None = None,
    ) -> ReindexResult:
        """Re-index every node carrying one of `labels`.

        Returns the number of bulk batches flushed and the number of nodes visited
        (visited, not indexed: nodes resolving to a delete are counted too).

        Raises:
            ValueError: if batch_size is not positive.
            ReindexFailed: if scanning or dispatching fails.
        """
        size = self.config.reindex_batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError(f"batch_size must be >= 1, got {size}")
        use_async = self.config.reindex_asynchronous if asynchronous is None else asynchronous

        mapping = self.config.mapping
        options = self.config.options
        targets = indexed_labels(mapping, dict.fromkeys(labels))

        logger.info(
            "reindex start (database=%s labels=%s batch_size=%s async=%s)",
            options.database,
            targets,
            size,
            use_async,
        )

        batches = 0
        documents = 0
        actions: PendingActionSet = {}
        try:
            for label in targets:
                for node in self.node_source.find_nodes(label, database=options.database):
                    documents += 1
                    actions.update(index_actions(node, mapping, options))
                    if len(actions) >= size:
                        self.dispatcher.dispatch(actions.values(), asynchronous=use_async, database=options.database)
                        actions = {}
                        batches += 1

                # Flush what is left of this label's scan.
                if actions:
                    self.dispatcher.dispatch(actions.values(), asynchronous=use_async, database=options.database)
                    actions = {}
                    batches += 1
        except Exception as e:
            logger.exception("reindex failed (database=%s)", options.database)
            raise ReindexFailed("Failed to re index") from e

        logger.info(
            "reindex done (database=%s batches=%s documents=%s)",
            options.database,
            batches,
            documents,
        )
        return ReindexResult(number_of_batches=batches, number_of_indexed_document=documents)

    def run_all(self, *, batch_size: int | None = None, asynchronous: bool | None = None) -> ReindexResult:
        """Re-index every label present in the graph (unindexed labels are skipped)."""
        try:
            labels = self.node_source.all_labels(database=self.config.options.database)
        except Exception as e:
            raise ReindexFailed("Failed to re index") from e
        return self.run(labels, batch_size=batch_size, asynchronous=asynchronous)
