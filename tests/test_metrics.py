"""Tests for the MetricsCollector class."""

import unittest

from download_metrics.metrics import MetricsCollector
from download_metrics.models import CollectionResult, RepositoryReport


def _make_result(**overrides) -> CollectionResult:
    """Helper to build a CollectionResult with sensible defaults."""
    defaults = dict(
        task_id="t1",
        repository="widget",
        success=True,
        latency_ms=100,
        pages_fetched=2,
        report=RepositoryReport(repository="widget", container_downloads={"v1": 1, "v2": 2}),
        error_type=None,
    )
    defaults.update(overrides)
    return CollectionResult(**defaults)


class TestMetricsCollector(unittest.TestCase):
    """Verify metrics recording and snapshot aggregation."""

    def test_empty_snapshot(self):
        """Snapshot with no events should have all zeros."""
        snap = MetricsCollector().snapshot(window_secs=30)
        self.assertEqual(snap.total_repositories, 0)
        self.assertEqual(snap.success_count, 0)
        self.assertEqual(snap.avg_latency_ms, 0.0)

    def test_records_success(self):
        metrics = MetricsCollector()
        metrics.record_result(_make_result())
        metrics.record_result(_make_result())
        snap = metrics.snapshot(window_secs=30)
        self.assertEqual(snap.total_repositories, 2)
        self.assertEqual(snap.success_count, 2)
        self.assertEqual(snap.pages_fetched, 4)
        self.assertEqual(snap.versions_counted, 4)

    def test_records_failures(self):
        """Failed repositories are counted, and their partial versions are not."""
        metrics = MetricsCollector()
        metrics.record_result(_make_result(success=False, error_type="FetchError"))
        metrics.record_result(_make_result(success=False, error_type="GitHubAPIError", report=None))
        metrics.record_result(_make_result())
        snap = metrics.snapshot()
        self.assertEqual(snap.failure_count, 2)
        self.assertEqual(snap.fetch_error_count, 1)
        self.assertEqual(snap.versions_counted, 2)

    def test_average_latency(self):
        metrics = MetricsCollector()
        metrics.record_result(_make_result(latency_ms=100))
        metrics.record_result(_make_result(latency_ms=200))
        self.assertAlmostEqual(metrics.snapshot().avg_latency_ms, 150.0)


if __name__ == "__main__":
    unittest.main()
