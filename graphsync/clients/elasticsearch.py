"""Elasticsearch client initialization and bulk execution."""
from __future__ import annotations

from functools import lru_cache
import logging
import sys
from typing import Any, Sequence

from elasticsearch import ApiError, Elasticsearch, TransportError, helpers

from graphsync.config import get_settings
from graphsync.indexing.errors import BulkWriteFailed, SearchTransportError
from graphsync.indexing.types import DEFAULT_DOC_TYPE, DocumentAction, UpsertAction

logger = logging.getLogger(__name__)

# Minimum delay between two cluster sniffs when node discovery is on.
DISCOVERY_INTERVAL_SEC = 60.0

# One batch is one bulk request, so byte-based chunking is off.
# The cluster's http.max_content_length still caps the request.
MAX_BULK_BYTES = sys.maxsize


class ElasticsearchClientError(Exception):
    """Elasticsearch client initialization error."""
    pass


@lru_cache(maxsize=1)
def get_es_client() -> Elasticsearch:
    """Get Elasticsearch client singleton.

    The client connects lazily; nothing is sent until the first request.

    Raises:
        ElasticsearchClientError: If no host is configured
    """
    settings = get_settings()
    hosts = settings.es_hosts_list()
    if not hosts:
        raise ElasticsearchClientError("Elasticsearch host is not configured")

    kwargs: dict[str, Any] = {}
    if settings.es_user and settings.es_password is not None:
        kwargs["basic_auth"] = (settings.es_user, settings.es_password)
    if settings.es_request_timeout_sec is not None:
        kwargs["request_timeout"] = settings.es_request_timeout_sec
    if settings.es_discovery:
        kwargs["sniff_on_start"] = True
        kwargs["sniff_on_node_failure"] = True
        kwargs["min_delay_between_sniffing"] = DISCOVERY_INTERVAL_SEC
    # TLS options are only accepted for https nodes.
    if not settings.es_verify_certs and any(h.startswith("https://") for h in hosts):
        kwargs["verify_certs"] = False
        kwargs["ssl_show_warn"] = False

    client = Elasticsearch(hosts, **kwargs)
    logger.info("Elasticsearch client created: %s", ",".join(hosts))
    return client


def to_bulk_action(action: DocumentAction) -> dict[str, Any]:
    """Translate a document action into a `helpers.bulk` action dict.

    Upserts are `index` ops: the stored document is replaced, never merged.
    """
    op: dict[str, Any] = {
        "_index": action.key.index_name,
        "_id": action.key.document_id,
    }
    # Custom types only exist with label-as-type mapping.
    if action.doc_type != DEFAULT_DOC_TYPE:
        op["_type"] = action.doc_type
    if isinstance(action, UpsertAction):
        op["_op_type"] = "index"
        op["_source"] = action.body
    else:
        op["_op_type"] = "delete"
    return op


def _is_missing_delete(item: dict[str, Any]) -> bool:
    info = item.get("delete")
    return isinstance(info, dict) and info.get("status") == 404 and "error" not in info


class ElasticsearchBulkClient:
    """Bulk executor backed by the official Elasticsearch client."""

    def __init__(self, es: Elasticsearch | None = None) -> None:
        self._es = es

    @property
    def es(self) -> Elasticsearch:
        if self._es is None:
            self._es = get_es_client()
        return self._es

    def execute(self, actions: Sequence[DocumentAction]) -> None:
        """Execute all actions in a single bulk request.

        Raises:
            BulkWriteFailed: the engine rejected the request or some of its items
            SearchTransportError: the engine could not be reached
        """
        ops = [to_bulk_action(a) for a in actions]
        if not ops:
            return

        try:
            _, errors = helpers.bulk(
                self.es,
                ops,
                chunk_size=len(ops),
                max_chunk_bytes=MAX_BULK_BYTES,
                raise_on_error=False,
                stats_only=False,
            )
        except ApiError as e:
            raise BulkWriteFailed(e.body) from e
        except TransportError as e:
            raise SearchTransportError(f"Elasticsearch transport error: {e}") from e

        # Deleting a document that was never indexed is not a failure.
        failures = [item for item in errors if not _is_missing_delete(item)]
        if failures:
            raise BulkWriteFailed(failures)

    def close(self) -> None:
        if self._es is None:
            return
        try:
            self._es.close()
        except Exception:
            logger.exception("failed to close Elasticsearch client")
