"""Commit hook entry points called by the host graph database.

- on_before_commit: classify the transaction's changes (pure, in-memory).
- on_after_commit: dispatch the collected actions as one bulk write.
- on_rollback: nothing; pending actions are simply dropped.

Indexing never affects the graph transaction: both hooks log failures and
return normally.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Iterable

from graphsync.indexing.classifier import ChangeClassifier
from graphsync.indexing.dispatcher import BulkDispatcher
from graphsync.indexing.types import ChangeSet, DocumentAction, PendingActionSet, SyncConfig

logger = logging.getLogger(__name__)


class SyncListener:
    """Transaction listener mirroring graph changes into the search index."""

    def __init__(self, config: SyncConfig, *, dispatcher: BulkDispatcher) -> None:
        self._config = config
        self.dispatcher = dispatcher

    @property
    def config(self) -> SyncConfig:
        return self._config

    def reconfigure(self, config: SyncConfig) -> None:
        """Swap in a new configuration.

        A single reference assignment: a classification already running keeps the
        snapshot it started with.
        """
        self._config = config
        logger.info(
            "sync listener reconfigured (database=%s labels=%s)",
            config.options.database,
            list(config.mapping),
        )

    def on_before_commit(self, changes: ChangeSet) -> PendingActionSet:
        config = self._config
        try:
            return ChangeClassifier(config).classify(changes)
        except Exception:
            logger.exception("[%s] failed to classify transaction changes", config.options.database)
            return {}

    def on_after_commit(self, actions: PendingActionSet | Iterable[DocumentAction]) -> Future | None:
        config = self._config
        batch = list(actions.values()) if isinstance(actions, dict) else list(actions)
        if not batch:
            return None
        try:
            return self.dispatcher.dispatch(
                batch, asynchronous=config.asynchronous, database=config.options.database
            )
        except Exception:
            logger.warning("[%s] error updating search index", config.options.database, exc_info=True)
            return None

    def on_rollback(self, actions: PendingActionSet | None = None) -> None:
        return None
