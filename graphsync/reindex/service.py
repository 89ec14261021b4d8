from __future__ import annotations

import logging

from graphsync.config import get_settings
from graphsync.indexing.manager import SyncManager, get_sync_manager
from graphsync.reindex.schemas import ReindexResponse, SyncStatus

logger = logging.getLogger(__name__)


class ReindexService:
    def __init__(self, manager: SyncManager | None = None) -> None:
        self.manager = manager or get_sync_manager()

    def index(self, labels: list[str], *, batch_size: int | None = None, asynchronous: bool | None = None) -> ReindexResponse:
        result = self.manager.reindexer().run(labels, batch_size=batch_size, asynchronous=asynchronous)
        return ReindexResponse(
            number_of_batches=result.number_of_batches,
            number_of_indexed_document=result.number_of_indexed_document,
        )

    def index_all(self, *, batch_size: int | None = None, asynchronous: bool | None = None) -> ReindexResponse:
        result = self.manager.reindexer().run_all(batch_size=batch_size, asynchronous=asynchronous)
        return ReindexResponse(
            number_of_batches=result.number_of_batches,
            number_of_indexed_document=result.number_of_indexed_document,
        )

    def reload(self) -> SyncStatus:
        """Re-read settings and swap in the new index specification."""
        get_settings.cache_clear()
        self.manager.reload(get_settings())
        return self.status()

    def status(self) -> SyncStatus:
        config = self.manager.config
        indices = {d.index_name for defs in config.mapping.values() for d in defs}
        return SyncStatus(
            enabled=config.enabled,
            database=config.options.database,
            labels=list(config.mapping),
            indices=sorted(indices),
            error=self.manager.startup_error,
        )
