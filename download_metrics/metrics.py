from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Deque, List, Optional

from .models import CollectionResult, MetricsSnapshot


class MetricsCollector:
    """Thread-safe collector for runtime collection metrics.

    Records CollectionResult events and produces aggregated MetricsSnapshot
    objects over configurable sliding time windows."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: Deque[tuple[float, CollectionResult]] = deque(maxlen=10000)

    def record_result(self, result: CollectionResult) -> None:
        """Record a collection result with the current timestamp."""
        with self._lock:
            self._events.append((time.time(), result))

    def snapshot(self, window_secs: Optional[int] = None) -> MetricsSnapshot:
        """Aggregate events from the last window_secs seconds (all events when None)."""
        now = time.time()
        cutoff = now - window_secs if window_secs is not None else float("-inf")
        with self._lock:
            events: List[CollectionResult] = [e for ts, e in self._events if ts >= cutoff]
        total = len(events)
        success_count = sum(1 for e in events if e.success)
        fetch_error_count = sum(1 for e in events if e.error_type == "FetchError")
        pages_fetched = sum(e.pages_fetched for e in events)
        versions_counted = sum(len(e.report.container_downloads) for e in events if e.success and e.report)
        avg_latency_ms = (sum(e.latency_ms for e in events) / total) if total else 0.0

        return MetricsSnapshot(
            window_secs=window_secs or 0,
            total_repositories=total,
            success_count=success_count,
            failure_count=total - success_count,
            fetch_error_count=fetch_error_count,
            pages_fetched=pages_fetched,
            versions_counted=versions_counted,
            avg_latency_ms=avg_latency_ms,
            timestamp=now,
        )
