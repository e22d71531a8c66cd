from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence


class DownloadMetricsError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(DownloadMetricsError):
    """Settings that are absent or unusable; ``keys`` names the variables."""

    def __init__(self, keys: Iterable[str], reason: str = "missing required settings") -> None:
        self.keys = list(keys)
        super().__init__(f"{reason}: {', '.join(self.keys)}")


class PaginationError(DownloadMetricsError):
    """Aborts a pagination run.

    ``partial`` holds the counts accumulated before the failure and
    ``pages_fetched`` the number of pages merged into them.  Both are filled
    in by the pagination driver.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.partial: Dict[str, int] = {}
        self.pages_fetched = 0


class FetchError(PaginationError):
    def __init__(self, url: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"error fetching {url!r}: {message}")
        self.url = url
        self.status_code = status_code


class PaginationLimitExceeded(PaginationError):
    def __init__(self, base_url: str, max_pages: int) -> None:
        super().__init__(f"{base_url!r} still had entries after {max_pages} pages")
        self.base_url = base_url
        self.max_pages = max_pages


class CountParseError(DownloadMetricsError, ValueError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"invalid download count: {raw!r}")
        self.raw = raw


class MissingLabelError(DownloadMetricsError):
    def __init__(self, tags: Sequence[str]) -> None:
        super().__init__(f"tagged entry has no usable label: {list(tags)!r}")
        self.tags = tuple(tags)


class GitHubAPIError(DownloadMetricsError):
    def __init__(self, path: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"GitHub API {path}: {message}")
        self.path = path
        self.status_code = status_code
