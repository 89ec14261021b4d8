"""Bulk dispatcher: the only place document actions leave the process."""
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Callable, Iterable, Protocol, Sequence

from graphsync.indexing.errors import BulkWriteFailed
from graphsync.indexing.runtime import DispatchRuntime, get_dispatch_runtime
from graphsync.indexing.types import DocumentAction

logger = logging.getLogger(__name__)


class BulkClient(Protocol):
    """Wire client able to execute one batch of upserts/deletes.

    Implementations raise BulkWriteFailed when the engine reports item failures
    and SearchTransportError when the engine can't be reached.
    """

    def execute(self, actions: Sequence[DocumentAction]) -> None: ...


class BulkDispatcher:
    """Send a batch of actions as one bulk request, synchronously or in the background."""

    def __init__(
        self,
        client: BulkClient,
        *,
        runtime: DispatchRuntime | None = None,
    ) -> None:
        self.client = client
        self._runtime = runtime

    @property
    def runtime(self) -> DispatchRuntime:
        if self._runtime is None:
            self._runtime = get_dispatch_runtime()
        return self._runtime

    def dispatch(
        self,
        actions: Iterable[DocumentAction],
        *,
        asynchronous: bool = False,
        database: str | None = None,
    ) -> Future | None:
        """Dispatch actions as a single bulk write.

        Synchronous mode raises BulkWriteFailed / SearchTransportError. Asynchronous
        mode returns the pending Future at once; its outcome is only logged.
        `database` only labels log lines; callers pass the scope of their config snapshot.
        """
        batch = list(actions)
        if not batch:
            return None

        if asynchronous:
            fut = self.runtime.submit(lambda: self.client.execute(batch))
            fut.add_done_callback(_completion_callback(database, len(batch)))
            return fut

        self.client.execute(batch)
        logger.debug("[%s] bulk update success (actions=%s)", database, len(batch))
        return None


def _completion_callback(database: str | None, count: int) -> Callable[[Future], None]:
    def _done(fut: Future) -> None:
        if fut.cancelled():
            logger.warning("[%s] bulk update cancelled (actions=%s)", database, count)
            return
        exc = fut.exception()
        if exc is None:
            logger.debug("[%s] bulk update success (actions=%s)", database, count)
        elif isinstance(exc, BulkWriteFailed):
            logger.error("[%s] bulk update failed (actions=%s): %s", database, count, exc.payload)
        else:
            logger.error(
                "[%s] problem updating search index (actions=%s)",
                database,
                count,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    return _done
