from __future__ import annotations

import unittest
from unittest.mock import patch

from tests._bootstrap import bootstrap_imports, reset_caches
from tests._fakes import ListNodeSource, RecordingBulkClient


bootstrap_imports()
reset_caches()

from fastapi.testclient import TestClient  # noqa: E402

from graphsync.config import Settings  # noqa: E402
from graphsync.indexing.manager import SyncManager, build_sync_config  # noqa: E402
from graphsync.main import app  # noqa: E402


class HealthTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_caches()

    def tearDown(self) -> None:
        reset_caches()

    def test_health_reports_indexing(self) -> None:
        manager = SyncManager(
            build_sync_config(Settings(ES_INDEX_SPEC="my_index:MyLabel(foo)")),
            bulk_client=RecordingBulkClient(),
            node_source=ListNodeSource([]),
        )
        client = TestClient(app)

        with patch("graphsync.reindex.service.get_sync_manager", return_value=manager), patch(
            "graphsync.main.check_neo4j_health", return_value=(True, "ok")
        ):
            resp = client.get("/health")

        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["status"], "ok")
        self.assertTrue(data["indexing"]["enabled"])
        self.assertEqual(data["indexing"]["labels"], ["MyLabel"])
        self.assertTrue(data["graph"]["healthy"])
        self.assertIn("x-request-id", resp.headers)

    def test_health_degraded_when_graph_unreachable(self) -> None:
        manager = SyncManager(
            build_sync_config(Settings()),
            bulk_client=RecordingBulkClient(),
            node_source=ListNodeSource([]),
        )
        client = TestClient(app)

        with patch("graphsync.reindex.service.get_sync_manager", return_value=manager), patch(
            "graphsync.main.check_neo4j_health", return_value=(False, "cannot reach Neo4j")
        ):
            resp = client.get("/health")

        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(data["status"], "degraded")
        self.assertFalse(data["indexing"]["enabled"])
        self.assertEqual(data["graph"]["message"], "cannot reach Neo4j")


if __name__ == "__main__":
    unittest.main()
