"""Background writer for cache population and invalidation.

Requests hand cache writes to a bounded queue and return immediately. A
single daemon thread drains the queue. Jobs that fail or that do not fit in
the queue are counted so the loss is visible in ``stats`` and in the logs.
"""

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheJob:
    description: str
    func: Callable[..., Any]
    args: tuple[Any, ...]


_STOP = object()


class CacheWriter:
    """Bounded work queue consumed by one dedicated cache-writer thread."""

    def __init__(self, max_pending: int = 1000):
        self._queue: queue.Queue = queue.Queue(maxsize=max_pending)
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._stopped = False
        self.completed = 0
        self.failed = 0
        self.dropped = 0

    @property
    def stats(self) -> dict[str, int]:
        return {
            "pending": self._queue.qsize(),
            "completed": self.completed,
            "failed": self.failed,
            "dropped": self.dropped,
        }

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            self._stopped = False
            self._ensure_thread()

    def _ensure_thread(self) -> None:
        # Caller holds self._lock.
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="cache-writer", daemon=True)
        self._thread.start()

    def submit(self, description: str, func: Callable[..., Any], *args: Any) -> bool:
        """Queue a cache operation without waiting for it.

        Returns False when the job was dropped, either because the queue is
        full or because the writer has been stopped.
        """
        with self._lock:
            if self._stopped:
                self.dropped += 1
                logger.warning(f"Cache writer stopped, dropped job: {description}")
                return False
            self._ensure_thread()
        try:
            self._queue.put_nowait(CacheJob(description, func, args))
        except queue.Full:
            with self._lock:
                self.dropped += 1
            logger.warning(f"Cache writer queue full, dropped job: {description}")
            return False
        return True

    def flush(self) -> None:
        """Block until every queued job has run."""
        if self.running:
            self._queue.join()

    def stop(self, timeout: float = 5.0) -> None:
        """Drain outstanding jobs and stop the writer thread.

        Jobs submitted afterwards are dropped until :meth:`start` is called.
        """
        with self._lock:
            self._stopped = True
        thread = self._thread
        if thread is None or not thread.is_alive():
            return
        self._queue.put(_STOP)
        thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    return
                job.func(*job.args)
                self.completed += 1
            except Exception as e:
                self.failed += 1
                logger.warning(f"Cache job failed ({job.description}): {e}")
            finally:
                self._queue.task_done()
