"""Neo4j driver setup, health check and label-scoped node scans for re-index jobs."""
from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any, Iterator

from neo4j import Driver, GraphDatabase
from neo4j import time as neo4j_time
from neo4j.spatial import Point

from graphsync.config import get_settings
from graphsync.indexing.types import GraphNode
from graphsync.indexing.values import Duration, GeoPoint

logger = logging.getLogger(__name__)


class Neo4jClientError(Exception):
    """The graph database is not configured or cannot be reached."""


@lru_cache(maxsize=1)
def get_neo4j_driver() -> Driver:
    """Create the shared driver and check that the server answers.

    Raises:
        Neo4jClientError: missing URI/user, or the server is unreachable
    """
    settings = get_settings()
    uri = settings.neo4j_uri.strip()
    user = settings.neo4j_user.strip()
    if not (uri and user):
        raise Neo4jClientError("NEO4J_URI and NEO4J_USER must be set")

    driver = GraphDatabase.driver(uri, auth=(user, settings.neo4j_password.strip()))
    try:
        driver.verify_connectivity()
    except Exception as e:
        driver.close()
        raise Neo4jClientError(f"cannot reach Neo4j at {uri}: {e}") from e
    logger.info("Neo4j driver ready: %s (database=%s)", uri, settings.database_name())
    return driver


def check_neo4j_health() -> tuple[bool, str]:
    """Check that the graph database answers; never raises."""
    try:
        get_neo4j_driver().verify_connectivity()
    except Exception as e:
        return False, str(e)
    return True, "ok"


def from_driver_value(value: Any) -> Any:
    """Convert a driver property value into the property value types the indexer knows."""
    if isinstance(value, Point):
        coords = tuple(value)
        return GeoPoint(
            x=coords[0],
            y=coords[1],
            z=coords[2] if len(coords) > 2 else None,
            srid=getattr(value, "srid", None),
        )
    if isinstance(value, (neo4j_time.DateTime, neo4j_time.Date, neo4j_time.Time)):
        return value.to_native()
    if isinstance(value, neo4j_time.Duration):
        return Duration(
            months=value.months,
            days=value.days,
            seconds=value.seconds,
            nanoseconds=value.nanoseconds,
        )
    if isinstance(value, list):
        return [from_driver_value(item) for item in value]
    return value


def to_graph_node(node: Any) -> GraphNode:
    """Snapshot a driver node (labels, element id, converted properties).

    The node's identity is the driver's `element_id`. Document ids are built
    from it, so whatever feeds commit hooks must report the same identity for
    the same node, or re-index and live updates write different documents.
    """
    return GraphNode(
        node_id=node.element_id,
        node_labels=tuple(sorted(node.labels)),
        properties={key: from_driver_value(value) for key, value in node.items()},
    )


def _quote_label(label: str) -> str:
    return "`" + label.replace("`", "``") + "`"


class Neo4jNodeSource:
    """Node scans for re-index jobs, one session per scan.

    The target database is chosen per call so a reloaded config takes effect
    on the next scan.
    """

    def __init__(self, driver: Driver | None = None) -> None:
        self._driver = driver

    @property
    def driver(self) -> Driver:
        if self._driver is None:
            self._driver = get_neo4j_driver()
        return self._driver

    def find_nodes(self, label: str, *, database: str | None = None) -> Iterator[GraphNode]:
        """Lazily stream every node carrying `label`."""
        query = f"MATCH (n:{_quote_label(label)}) RETURN n"
        with self.driver.session(database=database) as session:
            result = session.run(query)
            for record in result:
                yield to_graph_node(record["n"])

    def all_labels(self, *, database: str | None = None) -> list[str]:
        with self.driver.session(database=database) as session:
            result = session.run("CALL db.labels() YIELD label RETURN label")
            return [record["label"] for record in result]


def close_neo4j_driver() -> None:
    """Close the shared driver if one was created."""
    if get_neo4j_driver.cache_info().currsize:
        get_neo4j_driver().close()
        get_neo4j_driver.cache_clear()
