"""Unit tests for the bulk dispatcher and its background runtime."""
from __future__ import annotations

import threading
import unittest
from concurrent.futures import Future

from tests._bootstrap import bootstrap_imports
from tests._fakes import InlineRuntime, RecordingBulkClient


bootstrap_imports()

from graphsync.indexing.dispatcher import BulkDispatcher  # noqa: E402
from graphsync.indexing.errors import BulkWriteFailed, SearchTransportError  # noqa: E402
from graphsync.indexing.runtime import DispatchRuntime  # noqa: E402
from graphsync.indexing.types import DeleteAction, DocumentActionKey, UpsertAction  # noqa: E402


def _actions() -> list:
    key_a = DocumentActionKey("neo4j", "my_index", "neo4j_1")
    key_b = DocumentActionKey("neo4j", "my_index", "neo4j_2")
    return [
        UpsertAction(key=key_a, doc_type="_doc", body={"foo": "bar"}),
        DeleteAction(key=key_b, doc_type="_doc"),
    ]


class SyncDispatchTests(unittest.TestCase):
    def test_sends_one_bulk_request(self) -> None:
        client = RecordingBulkClient()
        dispatcher = BulkDispatcher(client, runtime=InlineRuntime())

        rv = dispatcher.dispatch(_actions())

        self.assertIsNone(rv)
        self.assertEqual(len(client.batches), 1)
        self.assertEqual([a.op for a in client.batches[0]], ["upsert", "delete"])

    def test_empty_batch_sends_nothing(self) -> None:
        client = RecordingBulkClient()
        runtime = InlineRuntime()
        dispatcher = BulkDispatcher(client, runtime=runtime)

        self.assertIsNone(dispatcher.dispatch([]))
        self.assertIsNone(dispatcher.dispatch([], asynchronous=True))
        self.assertEqual(client.batches, [])
        self.assertEqual(runtime.submitted, 0)

    def test_failure_is_raised(self) -> None:
        client = RecordingBulkClient(error=BulkWriteFailed([{"index": {"status": 400}}]))
        dispatcher = BulkDispatcher(client, runtime=InlineRuntime())

        with self.assertRaises(BulkWriteFailed) as ctx:
            dispatcher.dispatch(_actions())
        self.assertEqual(ctx.exception.payload, [{"index": {"status": 400}}])

    def test_transport_failure_is_raised(self) -> None:
        client = RecordingBulkClient(error=SearchTransportError("down"))
        dispatcher = BulkDispatcher(client, runtime=InlineRuntime())

        with self.assertRaises(SearchTransportError):
            dispatcher.dispatch(_actions())


class AsyncDispatchTests(unittest.TestCase):
    def test_returns_future_and_runs_on_runtime(self) -> None:
        client = RecordingBulkClient()
        runtime = InlineRuntime()
        dispatcher = BulkDispatcher(client, runtime=runtime)

        with self.assertLogs("graphsync.indexing.dispatcher", level="DEBUG") as logs:
            fut = dispatcher.dispatch(_actions(), asynchronous=True)

        self.assertIsInstance(fut, Future)
        self.assertIsNone(fut.result())
        self.assertEqual(runtime.submitted, 1)
        self.assertEqual(len(client.batches), 1)
        self.assertTrue(any("[neo4j] bulk update success" in line for line in logs.output))

    def test_item_failures_are_logged_not_raised(self) -> None:
        client = RecordingBulkClient(error=BulkWriteFailed([{"index": {"status": 400, "error": "mapper"}}]))
        dispatcher = BulkDispatcher(client, runtime=InlineRuntime())

        with self.assertLogs("graphsync.indexing.dispatcher", level="ERROR") as logs:
            fut = dispatcher.dispatch(_actions(), asynchronous=True)

        self.assertIsInstance(fut.exception(), BulkWriteFailed)
        self.assertTrue(any("bulk update failed" in line and "mapper" in line for line in logs.output))

    def test_transport_errors_are_logged_not_raised(self) -> None:
        client = RecordingBulkClient(error=SearchTransportError("connection refused"))
        dispatcher = BulkDispatcher(client, runtime=InlineRuntime())

        with self.assertLogs("graphsync.indexing.dispatcher", level="ERROR") as logs:
            dispatcher.dispatch(_actions(), asynchronous=True)

        self.assertTrue(any("problem updating search index" in line for line in logs.output))

    def test_real_runtime_thread(self) -> None:
        seen: list[str] = []

        class _ThreadRecordingClient(RecordingBulkClient):
            def execute(self, actions) -> None:  # noqa: ANN001
                seen.append(threading.current_thread().name)
                super().execute(actions)

        runtime = DispatchRuntime(name="test-dispatch")
        try:
            client = _ThreadRecordingClient()
            dispatcher = BulkDispatcher(client, runtime=runtime)

            fut = dispatcher.dispatch(_actions(), asynchronous=True)
            fut.result(timeout=5)
        finally:
            runtime.shutdown(timeout_sec=5)

        self.assertEqual(seen, ["test-dispatch"])
        self.assertEqual(len(client.batches), 1)


class DispatchRuntimeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.runtime = DispatchRuntime(name="test-runtime")

    def tearDown(self) -> None:
        self.runtime.shutdown(timeout_sec=5)

    def test_submit_returns_result(self) -> None:
        self.assertEqual(self.runtime.submit(lambda: 1 + 1).result(timeout=5), 2)

    def test_submit_propagates_exception(self) -> None:
        def boom() -> None:
            raise ValueError("boom")

        with self.assertRaises(ValueError):
            self.runtime.submit(boom).result(timeout=5)

    def test_jobs_run_in_submission_order(self) -> None:
        order: list[int] = []
        futures = [self.runtime.submit(lambda i=i: order.append(i)) for i in range(5)]
        for fut in futures:
            fut.result(timeout=5)

        self.assertEqual(order, [0, 1, 2, 3, 4])

    def test_submit_after_shutdown_fails(self) -> None:
        self.runtime.shutdown(timeout_sec=5)

        with self.assertRaises(RuntimeError):
            self.runtime.submit(lambda: None)


if __name__ == "__main__":
    unittest.main()
