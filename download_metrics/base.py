from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .metrics import MetricsCollector
from .models import CollectionResult, DownloadSummary, ReleaseInfo, RepositoryReport, RepositoryTask

logger = logging.getLogger(__name__)


@dataclass
class ReportBuilder:
    """Mutable report filled in step by step during one collection.

    On failure whatever was gathered so far becomes the partial report.
    """

    repository: str
    releases: List[ReleaseInfo] = field(default_factory=list)
    container_downloads: Dict[str, int] = field(default_factory=dict)
    stars: Optional[int] = None
    download_summary: Optional[DownloadSummary] = None
    pages_fetched: int = 0

    def build(self) -> RepositoryReport:
        return RepositoryReport(
            repository=self.repository,
            releases=list(self.releases),
            container_downloads=dict(self.container_downloads),
            stars=self.stars,
            download_summary=self.download_summary,
        )


class BaseCollector(ABC):
    """Abstract base class defining a common per-repository collection pipeline.

    run() never raises: any failure becomes an unsuccessful CollectionResult
    whose error_type is the exception class name, so one repository cannot
    stop the others.
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None) -> None:
        self._metrics = metrics

    def run(self, task: RepositoryTask) -> CollectionResult:
        start_ms = self._now_ms()
        builder = ReportBuilder(repository=task.repo)

        try:
            self.validate(task)
            self.collect(task, builder)
        except Exception as exc:  # noqa: BLE001
            logger.error("Collection failed for %s: %s", task.full_name, exc)
            result = CollectionResult(
                task_id=task.task_id,
                repository=task.repo,
                success=False,
                latency_ms=self._now_ms() - start_ms,
                pages_fetched=builder.pages_fetched,
                report=builder.build(),
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            result = CollectionResult(
                task_id=task.task_id,
                repository=task.repo,
                success=True,
                latency_ms=self._now_ms() - start_ms,
                pages_fetched=builder.pages_fetched,
                report=builder.build(),
                error_type=None,
            )

        if self._metrics:
            self._metrics.record_result(result)
        return result

    def validate(self, task: RepositoryTask) -> None:
        if not task.owner:
            raise ValueError("task.owner is required")
        if not task.repo:
            raise ValueError("task.repo is required")

    @abstractmethod
    def collect(self, task: RepositoryTask, builder: ReportBuilder) -> None:
        ...

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)
