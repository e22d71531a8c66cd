from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

GITHUB_WEB_URL = "https://github.com"


@dataclass(frozen=True)
class RepositoryTask:
    task_id: str
    owner: str
    repo: str
    package: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def container_url(self) -> str:
        """First page of the container-version listing for this repository."""
        package = self.package or self.repo
        return f"{GITHUB_WEB_URL}/{self.owner}/{self.repo}/pkgs/container/{package}/versions"

    @property
    def package_url(self) -> str:
        package = self.package or self.repo
        return f"{GITHUB_WEB_URL}/{self.owner}/{self.repo}/pkgs/container/{package}"


@dataclass(frozen=True)
class VersionEntry:
    """One row of the versions listing, before classification."""

    tags: Tuple[str, ...] = ()
    count_text: Optional[str] = None


@dataclass(frozen=True)
class PageResult:
    page: int
    url: str
    counts: Mapping[str, int]
    entries_seen: int
    skipped: int = 0


class PaginationPhase(str, Enum):
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PaginationState:
    url: str
    page: int = 1
    phase: PaginationPhase = PaginationPhase.FETCHING

    @property
    def finished(self) -> bool:
        return self.phase in (PaginationPhase.DONE, PaginationPhase.FAILED)


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    content_type: str
    download_count: int


@dataclass(frozen=True)
class ReleaseInfo:
    tag_name: str
    assets: List[ReleaseAsset] = field(default_factory=list)


@dataclass(frozen=True)
class DownloadSummary:
    total: int = 0
    last_30_days: int = 0
    last_week: int = 0
    today: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "last_30_days": self.last_30_days,
            "last_week": self.last_week,
            "today": self.today,
        }


@dataclass(frozen=True)
class RepositoryReport:
    repository: str
    releases: List[ReleaseInfo] = field(default_factory=list)
    container_downloads: Dict[str, int] = field(default_factory=dict)
    stars: Optional[int] = None
    download_summary: Optional[DownloadSummary] = None


@dataclass(frozen=True)
class CollectionResult:
    task_id: str
    repository: str
    success: bool
    latency_ms: int
    pages_fetched: int
    report: Optional[RepositoryReport]
    error_type: Optional[str]
    error: Optional[str] = None


@dataclass(frozen=True)
class MetricsSnapshot:
    window_secs: int
    total_repositories: int
    success_count: int
    failure_count: int
    fetch_error_count: int
    pages_fetched: int
    versions_counted: int
    avg_latency_ms: float
    timestamp: float
