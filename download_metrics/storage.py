from __future__ import annotations

import json
import queue
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Optional

from .models import CollectionResult


class StorageBase(ABC):
    """Where per-repository collection results are recorded.

    Records are kept for failed repositories too, so the partial counts of
    a run that was not published can still be inspected.
    """

    @abstractmethod
    def write(self, result: CollectionResult) -> None:
        """Record the outcome of one repository."""

    @abstractmethod
    def close(self) -> None:
        """Wait for queued records and release the backend."""


def result_record(result: CollectionResult) -> dict:
    return {
        "timestamp": time.time(),
        "task_id": result.task_id,
        "repository": result.repository,
        "success": result.success,
        "latency_ms": result.latency_ms,
        "pages_fetched": result.pages_fetched,
        "error_type": result.error_type,
        "error": result.error,
        "report": asdict(result.report) if result.report else None,
    }


class JsonlStorage(StorageBase):
    """Appends one JSON object per repository to a .jsonl file.

    The file is opened by a background thread, so the publishing loop never
    blocks on disk I/O.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._pending: queue.Queue[Optional[CollectionResult]] = queue.Queue()
        self._worker = threading.Thread(target=self._drain, name="results-writer", daemon=True)
        self._worker.start()

    def write(self, result: CollectionResult) -> None:
        self._pending.put(result)

    def close(self) -> None:
        self._pending.put(None)
        self._worker.join(timeout=5)

    def _drain(self) -> None:
        with open(self._path, "a", encoding="utf-8") as out:
            for result in iter(self._pending.get, None):
                out.write(json.dumps(result_record(result), ensure_ascii=False))
                out.write("\n")
                out.flush()
