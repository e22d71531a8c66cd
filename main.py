from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from typing import List, Optional

from download_metrics.collector import RepositoryCollector
from download_metrics.config import Settings, load_settings
from download_metrics.controller import ThreadPoolController
from download_metrics.errors import ConfigError
from download_metrics.exporter import DryRunSink, MetricSink, PushgatewaySink
from download_metrics.fetcher import PageFetcher
from download_metrics.github import GitHubClient
from download_metrics.metrics import MetricsCollector
from download_metrics.paginator import PaginationDriver
from download_metrics.rate_limiter import RateLimiter
from download_metrics.storage import JsonlStorage
from download_metrics.models import RepositoryTask

logger = logging.getLogger("download_metrics")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _build_tasks(org: str, repos: List[str], package: Optional[str] = None) -> List[RepositoryTask]:
    return [
        RepositoryTask(task_id=str(uuid.uuid4()), owner=org, repo=repo, package=package)
        for repo in repos
    ]


def _build_fetcher(settings: Settings, rate_limiter: RateLimiter) -> PageFetcher:
    return PageFetcher(
        rate_limiter=rate_limiter,
        timeout=settings.request_timeout,
        impersonate=settings.impersonate,
    )


def scan_url(url: str, settings: Settings) -> int:
    """Scan a single versions listing and print the counts as JSON."""
    fetcher = _build_fetcher(settings, RateLimiter(qps=settings.qps))
    run = PaginationDriver(fetcher, max_pages=settings.max_pages).run(url)
    print(json.dumps(run.counts, indent=2, sort_keys=True))
    print(
        f"pages={run.pages_fetched} versions={len(run.counts)} state={run.state.phase.value} "
        f"error={type(run.error).__name__ if run.error else None}",
        file=sys.stderr,
    )
    return EXIT_OK if run.success else EXIT_FAILED


def run_collection(
    settings: Settings,
    sink: MetricSink,
    results_path: Optional[str] = None,
    with_summary: bool = False,
    package: Optional[str] = None,
) -> int:
    metrics = MetricsCollector()
    rate_limiter = RateLimiter(qps=settings.qps)
    fetcher = _build_fetcher(settings, rate_limiter)
    collector = RepositoryCollector(
        github=GitHubClient(settings.github_token, rate_limiter=rate_limiter, timeout=settings.request_timeout),
        fetcher=fetcher,
        driver=PaginationDriver(fetcher, max_pages=settings.max_pages),
        with_summary=with_summary,
        metrics=metrics,
    )
    storage = JsonlStorage(results_path) if results_path else None
    tasks = _build_tasks(settings.github_org, settings.github_repos, package=package)

    publish_failures = 0
    with ThreadPoolController(max_workers=settings.max_workers) as controller:
        futures = [controller.submit(collector.run, task) for task in tasks]

        # Publish from this thread only, in submission order.
        for fut in futures:
            result = fut.result()
            if storage:
                storage.write(result)
            print(
                f"repo={result.repository} success={result.success} pages={result.pages_fetched} "
                f"versions={len(result.report.container_downloads) if result.report else 0} "
                f"latency_ms={result.latency_ms} error={result.error_type}"
            )
            if not result.success or result.report is None:
                continue
            try:
                sink.publish(result.report)
            except Exception:  # noqa: BLE001
                logger.exception("Error pushing metrics for %s", result.repository)
                publish_failures += 1

    if storage:
        storage.close()

    snap = metrics.snapshot()
    print(
        f"\nDONE: success={snap.success_count} fail={snap.failure_count} total={snap.total_repositories} "
        f"pages={snap.pages_fetched} versions={snap.versions_counted} throttled={rate_limiter.waits} "
        f"publish_failures={publish_failures}"
    )
    if snap.failure_count or publish_failures:
        return EXIT_FAILED
    return EXIT_OK


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect GitHub release, container and star counts and push them to a Prometheus Pushgateway.",
    )
    parser.add_argument("--org", help="GitHub owner (overrides GITHUB_ORG)")
    parser.add_argument("--repos", help="Comma separated repositories (overrides GITHUB_REPOS)")
    parser.add_argument("--package", help="Container package name when it differs from the repository")
    parser.add_argument("--scan-url", help="Only scan this container versions URL and print the counts")

    parser.add_argument("--dry-run", action="store_true", help="Print metrics instead of pushing them")
    parser.add_argument("--results", help="Append JSONL result records to this file")
    parser.add_argument("--with-summary", action="store_true", help="Also scrape the package download summary")

    parser.add_argument("--max-workers", type=int, help="Repositories collected in parallel")
    parser.add_argument("--qps", type=float, help="Global request rate limit")
    parser.add_argument("--max-pages", type=int, help="Maximum listing pages per repository (0 = unlimited)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.org:
        settings.github_org = args.org
    if args.repos:
        settings.github_repos = [r.strip() for r in args.repos.split(",") if r.strip()]
    if args.max_workers is not None:
        settings.max_workers = args.max_workers
    if args.qps is not None:
        settings.qps = args.qps
    if args.max_pages is not None:
        settings.max_pages = args.max_pages
    if args.timeout is not None:
        settings.request_timeout = args.timeout
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = _apply_overrides(load_settings(), args)
        if args.scan_url:
            settings.check_limits()
        else:
            settings.validate(require_push=not args.dry_run)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG

    if args.scan_url:
        return scan_url(args.scan_url, settings)
    if args.package and len(settings.github_repos) != 1:
        logger.error("--package can only be used with a single repository")
        return EXIT_CONFIG

    if args.dry_run:
        sink: MetricSink = DryRunSink()
    else:
        sink = PushgatewaySink(
            settings.pushgateway_url,
            username=settings.pushgateway_username,
            password=settings.pushgateway_password,
        )
    return run_collection(
        settings,
        sink,
        results_path=args.results,
        with_summary=args.with_summary,
        package=args.package,
    )


if __name__ == "__main__":
    sys.exit(main())
