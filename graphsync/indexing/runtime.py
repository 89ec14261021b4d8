"""Background execution path for asynchronous bulk dispatch.

One process-wide daemon thread drains a FIFO of jobs. Asynchronous dispatch
enqueues the bulk write and gets a Future back at once; completion callbacks
attached to that Future run on the dispatch thread.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from queue import SimpleQueue
from typing import Callable, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


class _Job(NamedTuple):
    fn: Callable[[], object]
    future: Future


# Queued after the last job on shutdown.
_STOP = None


class DispatchRuntime:
    def __init__(self, *, name: str = "graphsync-dispatch") -> None:
        self.name = name
        self._queue: "SimpleQueue[_Job | None]" = SimpleQueue()
        self._closed = threading.Event()
        self._worker = threading.Thread(target=self._drain, name=name, daemon=True)
        self._worker.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def submit(self, fn: Callable[[], R]) -> "Future[R]":
        """Enqueue `fn` for the dispatch thread.

        Raises:
            RuntimeError: the runtime has been shut down.
        """
        if self.closed:
            raise RuntimeError(f"{self.name} is shut down")
        future: Future = Future()
        self._queue.put(_Job(fn, future))
        return future

    def shutdown(self, *, timeout_sec: float | None = 10.0) -> None:
        """Refuse new jobs, let queued ones finish, then join the thread."""
        if self.closed:
            return
        self._closed.set()
        self._queue.put(_STOP)
        self._worker.join(timeout=timeout_sec)
        logger.info("dispatch runtime stopped (thread=%s alive=%s)", self.name, self._worker.is_alive())

    def _drain(self) -> None:
        logger.info("dispatch runtime ready (thread=%s)", self.name)
        for job in iter(self._queue.get, _STOP):
            # Cancelled before it got its turn.
            if not job.future.set_running_or_notify_cancel():
                continue
            try:
                outcome = job.fn()
            except BaseException as exc:  # noqa: BLE001
                job.future.set_exception(exc)
            else:
                job.future.set_result(outcome)


_shared: DispatchRuntime | None = None
_shared_lock = threading.Lock()


def get_dispatch_runtime() -> DispatchRuntime:
    """Process-wide runtime, started on first use."""
    global _shared
    with _shared_lock:
        if _shared is None or _shared.closed:
            _shared = DispatchRuntime()
        return _shared


def shutdown_dispatch_runtime() -> None:
    global _shared
    with _shared_lock:
        runtime = _shared
        _shared = None
    if runtime is not None:
        runtime.shutdown()
