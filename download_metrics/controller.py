from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from .models import CollectionResult, RepositoryTask

logger = logging.getLogger(__name__)


class ThreadPoolController:
    """Runs repository collections on a bounded thread pool.

    Each submitted call builds its own pagination state, so the only shared
    objects are the lock-protected rate limiter and metrics collector.  With
    max_workers=1 repositories are processed one after another.
    """

    def __init__(self, max_workers: int = 1) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="collect")
        self._lock = threading.Lock()
        self._running = False

    def start(self) -> None:
        with self._lock:
            self._running = True

    def stop(self, wait: bool = True) -> None:
        with self._lock:
            self._running = False
        self._executor.shutdown(wait=wait, cancel_futures=False)

    def __enter__(self) -> "ThreadPoolController":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop(wait=True)

    def submit(self, fn: Callable[[RepositoryTask], CollectionResult], task: RepositoryTask) -> Future:
        """Submit a collection function; a stopped controller yields a failed result."""
        with self._lock:
            running = self._running
        if not running:
            return self._executor.submit(self._stopped_result, task)
        return self._executor.submit(self._wrap_task, fn, task)

    @staticmethod
    def _wrap_task(fn: Callable[[RepositoryTask], CollectionResult], task: RepositoryTask) -> CollectionResult:
        try:
            return fn(task)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unhandled error collecting %s", task.full_name)
            return CollectionResult(
                task_id=task.task_id,
                repository=task.repo,
                success=False,
                latency_ms=0,
                pages_fetched=0,
                report=None,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    @staticmethod
    def _stopped_result(task: RepositoryTask) -> CollectionResult:
        return CollectionResult(
            task_id=task.task_id,
            repository=task.repo,
            success=False,
            latency_ms=0,
            pages_fetched=0,
            report=None,
            error_type="ControllerStopped",
        )
