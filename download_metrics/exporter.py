"""Prometheus export of collected repository reports.

Every report gets its own CollectorRegistry, so a push for one repository
never carries series of another and nothing is registered process-wide.
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest, push_to_gateway
from prometheus_client.exposition import basic_auth_handler, default_handler

from .models import RepositoryReport

logger = logging.getLogger(__name__)

JOB_PREFIX = "download_metrics_"


class DownloadMetrics:
    """Counters for one repository report, held in a private registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.release_downloads = Counter(
            "release_downloads",
            "Number of downloads for a given release",
            ["repository", "tag", "name", "content_type"],
            registry=self.registry,
        )
        self.container_downloads = Counter(
            "container_downloads",
            "Number of downloads of containers",
            ["repository", "version"],
            registry=self.registry,
        )
        self.star_count = Counter(
            "star_count",
            "Number of stars",
            ["repository"],
            registry=self.registry,
        )
        self.download_summary = Gauge(
            "container_download_summary",
            "Container package downloads over a period",
            ["repository", "period"],
            registry=self.registry,
        )

    @classmethod
    def from_report(cls, report: RepositoryReport) -> "DownloadMetrics":
        metrics = cls()
        metrics.add_report(report)
        return metrics

    def add_report(self, report: RepositoryReport) -> None:
        repo = report.repository
        for release in report.releases:
            for asset in release.assets:
                self.release_downloads.labels(
                    repository=repo,
                    tag=release.tag_name,
                    name=asset.name,
                    content_type=asset.content_type,
                ).inc(asset.download_count)
        self.add_container_counts(repo, report.container_downloads)
        if report.stars is not None:
            self.star_count.labels(repository=repo).inc(report.stars)
        if report.download_summary is not None:
            for period, value in report.download_summary.as_dict().items():
                self.download_summary.labels(repository=repo, period=period).set(value)

    def add_container_counts(self, repository: str, counts) -> None:
        for version, count in counts.items():
            self.container_downloads.labels(repository=repository, version=version).inc(count)

    def exposition(self) -> bytes:
        return generate_latest(self.registry)


class MetricSink(ABC):
    """Destination for the metrics of a successfully collected repository."""

    @abstractmethod
    def publish(self, report: RepositoryReport) -> None:
        """Export the metrics of a single report."""


class PushgatewaySink(MetricSink):
    def __init__(
        self,
        gateway: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = 30,
    ) -> None:
        self._gateway = gateway
        self._username = username
        self._password = password
        self._timeout = timeout

    def _auth_handler(self, url, method, timeout, headers, data):
        return basic_auth_handler(url, method, timeout, headers, data, self._username, self._password)

    def publish(self, report: RepositoryReport) -> None:
        metrics = DownloadMetrics.from_report(report)
        handler = self._auth_handler if self._username and self._password else default_handler
        job = f"{JOB_PREFIX}{report.repository}"
        logger.info("Pushing metrics for %s to %s", report.repository, self._gateway)
        push_to_gateway(self._gateway, job=job, registry=metrics.registry, timeout=self._timeout, handler=handler)
        logger.info("Successfully pushed metrics for %s", report.repository)


class DryRunSink(MetricSink):
    """Write the exposition text instead of pushing it."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdout

    def publish(self, report: RepositoryReport) -> None:
        metrics = DownloadMetrics.from_report(report)
        self._stream.write(f"# job: {JOB_PREFIX}{report.repository}\n")
        self._stream.write(metrics.exposition().decode("utf-8"))
