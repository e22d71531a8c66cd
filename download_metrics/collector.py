from __future__ import annotations

import logging
from typing import Optional

from .base import BaseCollector, ReportBuilder
from .extractor import extract_download_summary
from .fetcher import PageFetcher
from .github import GitHubClient
from .metrics import MetricsCollector
from .models import RepositoryTask
from .paginator import PaginationDriver

logger = logging.getLogger(__name__)


class RepositoryCollector(BaseCollector):
    """Collect releases, container downloads and stars for one repository."""

    def __init__(
        self,
        github: GitHubClient,
        fetcher: PageFetcher,
        driver: PaginationDriver,
        with_summary: bool = False,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(metrics=metrics)
        self._github = github
        self._fetcher = fetcher
        self._driver = driver
        self._with_summary = with_summary

    def collect(self, task: RepositoryTask, builder: ReportBuilder) -> None:
        logger.info("Processing repo: %s", task.full_name)
        builder.releases = self._github.list_releases(task.owner, task.repo)

        run = self._driver.run(task.container_url)
        builder.container_downloads = run.counts
        builder.pages_fetched = run.pages_fetched
        if run.error is not None:
            raise run.error

        if self._with_summary:
            builder.download_summary = extract_download_summary(self._fetcher.fetch(task.package_url))

        builder.stars = self._github.get_stargazers_count(task.owner, task.repo)
