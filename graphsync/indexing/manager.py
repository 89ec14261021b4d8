"""Sync runtime manager.

Goals:
- Single place where settings become an immutable SyncConfig.
- Process-level singleton owning the listener, dispatcher and clients.
- Live reconfiguration swaps the whole config; a bad spec never replaces a good one.

Notes:
- A spec that fails to parse at startup leaves indexing disabled rather than
  running with an ambiguous mapping.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from graphsync.clients.elasticsearch import ElasticsearchBulkClient
from graphsync.clients.neo4j import Neo4jNodeSource, close_neo4j_driver
from graphsync.config import Settings, get_settings
from graphsync.indexing.dispatcher import BulkClient, BulkDispatcher
from graphsync.indexing.errors import IndexingDisabledError, SpecParseError
from graphsync.indexing.hooks import SyncListener
from graphsync.indexing.reindex import NodeSource, Reindexer
from graphsync.indexing.runtime import DispatchRuntime, shutdown_dispatch_runtime
from graphsync.indexing.spec import parse_index_spec
from graphsync.indexing.types import DocumentOptions, SyncConfig

logger = logging.getLogger(__name__)


def build_document_options(settings: Settings) -> DocumentOptions:
    return DocumentOptions(
        database=settings.database_name(),
        scope_document_ids=settings.es_scope_document_ids,
        include_id=settings.es_include_id_field,
        include_labels=settings.es_include_labels_field,
        include_db=settings.es_include_db_field,
        use_type=settings.es_type_mapping,
    )


def build_sync_config(settings: Settings) -> SyncConfig:
    """Build the sync configuration from settings.

    Raises:
        SpecParseError: if the index specification declares a label twice.
    """
    return SyncConfig(
        mapping=parse_index_spec(settings.es_index_spec),
        options=build_document_options(settings),
        asynchronous=settings.es_async,
        reindex_batch_size=settings.es_reindex_batch_size,
        reindex_asynchronous=settings.es_reindex_async,
    )


class SyncManager:
    def __init__(
        self,
        config: SyncConfig,
        *,
        bulk_client: BulkClient,
        node_source: NodeSource,
        runtime: DispatchRuntime | None = None,
        startup_error: str | None = None,
    ) -> None:
        self.bulk_client = bulk_client
        self.node_source = node_source
        self.dispatcher = BulkDispatcher(bulk_client, runtime=runtime)
        self.listener = SyncListener(config, dispatcher=self.dispatcher)
        self.startup_error = startup_error

    @property
    def config(self) -> SyncConfig:
        return self.listener.config

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def require_enabled(self) -> SyncConfig:
        config = self.config
        if not config.enabled:
            reason = self.startup_error or "no index specification configured"
            raise IndexingDisabledError(f"indexing is disabled: {reason}")
        return config

    def reindexer(self) -> Reindexer:
        return Reindexer(self.require_enabled(), node_source=self.node_source, dispatcher=self.dispatcher)

    def reload(self, settings: Settings | None = None) -> SyncConfig:
        """Rebuild the config from settings and swap it in.

        Raises:
            SpecParseError: the current config is kept.
        """
        config = build_sync_config(settings or get_settings())
        self.startup_error = None
        self.listener.reconfigure(config)
        return config

    def close(self) -> None:
        close = getattr(self.bulk_client, "close", None)
        if callable(close):
            close()


def create_sync_manager(settings: Settings) -> SyncManager:
    startup_error: str | None = None
    try:
        config = build_sync_config(settings)
    except SpecParseError as e:
        logger.error("invalid index specification, indexing disabled: %s", e)
        config = SyncConfig(options=build_document_options(settings))
        startup_error = str(e)

    logger.info(
        "sync manager created (database=%s labels=%s async=%s)",
        config.options.database,
        list(config.mapping),
        config.asynchronous,
    )
    return SyncManager(
        config,
        bulk_client=ElasticsearchBulkClient(),
        node_source=Neo4jNodeSource(),
        startup_error=startup_error,
    )


@lru_cache(maxsize=1)
def get_sync_manager() -> SyncManager:
    return create_sync_manager(get_settings())


def shutdown_sync_manager() -> None:
    if get_sync_manager.cache_info().currsize:
        get_sync_manager().close()
        get_sync_manager.cache_clear()
    shutdown_dispatch_runtime()
    close_neo4j_driver()
