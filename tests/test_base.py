"""Tests for the BaseCollector abstract class."""

import unittest

from download_metrics.base import BaseCollector
from download_metrics.errors import FetchError
from download_metrics.metrics import MetricsCollector
from download_metrics.models import RepositoryTask


class DummyCollector(BaseCollector):
    def collect(self, task, builder):
        builder.container_downloads = {"v1": 1}
        builder.pages_fetched = 1
        builder.stars = 5


class TestBaseCollectorValidation(unittest.TestCase):
    """Verify that BaseCollector.validate() catches invalid tasks."""

    def test_validate_raises_on_empty_repo(self):
        """A task with an empty repository name should raise ValueError."""
        task = RepositoryTask(task_id="t1", owner="acme", repo="")
        with self.assertRaises(ValueError) as ctx:
            DummyCollector().validate(task)
        self.assertIn("repo", str(ctx.exception).lower())

    def test_validate_passes_with_valid_task(self):
        """A task with owner and repository should not raise."""
        DummyCollector().validate(RepositoryTask(task_id="t1", owner="acme", repo="widget"))


class TestBaseCollectorRun(unittest.TestCase):
    """Verify that BaseCollector.run() reports outcomes instead of raising."""

    def test_successful_run(self):
        metrics = MetricsCollector()
        result = DummyCollector(metrics=metrics).run(RepositoryTask(task_id="t1", owner="acme", repo="widget"))
        self.assertTrue(result.success)
        self.assertIsNone(result.error_type)
        self.assertEqual(result.report.container_downloads, {"v1": 1})
        self.assertEqual(result.report.stars, 5)
        self.assertEqual(result.pages_fetched, 1)
        self.assertEqual(metrics.snapshot().total_repositories, 1)

    def test_run_captures_exception_as_error_type(self):
        """If collect() raises, run() returns a failed result with the partial report."""

        class FailingCollector(BaseCollector):
            def collect(self, task, builder):
                builder.container_downloads = {"v1": 4}
                builder.pages_fetched = 2
                raise FetchError("https://example.com", "network down")

        with self.assertLogs("download_metrics.base", level="ERROR"):
            result = FailingCollector().run(RepositoryTask(task_id="t1", owner="acme", repo="widget"))
        self.assertFalse(result.success)
        self.assertEqual(result.error_type, "FetchError")
        self.assertIn("network down", result.error)
        self.assertEqual(result.report.container_downloads, {"v1": 4})
        self.assertEqual(result.pages_fetched, 2)

    def test_invalid_task_is_a_failed_result(self):
        with self.assertLogs("download_metrics.base", level="ERROR"):
            result = DummyCollector().run(RepositoryTask(task_id="t1", owner="", repo="widget"))
        self.assertFalse(result.success)
        self.assertEqual(result.error_type, "ValueError")


if __name__ == "__main__":
    unittest.main()
