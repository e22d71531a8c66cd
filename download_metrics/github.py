from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from .errors import GitHubAPIError
from .models import ReleaseAsset, ReleaseInfo
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
PER_PAGE = 100


class GitHubClient:
    """Minimal REST client for release assets and star counts.

    Each worker thread gets its own requests.Session.  A session passed in
    explicitly is used by every thread and belongs to the caller.
    """

    def __init__(
        self,
        token: Optional[str],
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = 20,
        session: Optional[requests.Session] = None,
        base_url: str = GITHUB_API_URL,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._shared_session = session
        if session is not None:
            session.headers.update(self._headers)
        self._local = threading.local()

    def _session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self._headers)
            self._local.session = session
        return session

    def list_releases(self, owner: str, repo: str) -> List[ReleaseInfo]:
        releases: List[ReleaseInfo] = []
        for release in self._get_paginated(f"/repos/{owner}/{repo}/releases"):
            assets = [
                ReleaseAsset(
                    name=a.get("name") or "",
                    content_type=a.get("content_type") or "",
                    download_count=int(a.get("download_count") or 0),
                )
                for a in self._get_paginated(f"/repos/{owner}/{repo}/releases/{release['id']}/assets")
            ]
            releases.append(ReleaseInfo(tag_name=release.get("tag_name") or "", assets=assets))
        logger.debug("%s/%s: %d releases", owner, repo, len(releases))
        return releases

    def get_stargazers_count(self, owner: str, repo: str) -> int:
        data = self._get(f"/repos/{owner}/{repo}")
        if not isinstance(data, dict) or "stargazers_count" not in data:
            raise GitHubAPIError(f"/repos/{owner}/{repo}", "response has no stargazers_count")
        return int(data["stargazers_count"])

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if self._rate_limiter:
            self._rate_limiter.acquire()
        try:
            resp = self._session().get(f"{self._base_url}{path}", params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise GitHubAPIError(path, f"{type(exc).__name__}: {exc}") from exc
        if not 200 <= resp.status_code < 300:
            message = None
            try:
                payload = resp.json()
                if isinstance(payload, dict):
                    message = payload.get("message")
            except ValueError:
                pass
            raise GitHubAPIError(path, message or f"HTTP {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise GitHubAPIError(path, "invalid JSON", status_code=resp.status_code) from exc

    def _get_paginated(self, path: str) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            data = self._get(path, params={"per_page": PER_PAGE, "page": page})
            if not isinstance(data, list):
                raise GitHubAPIError(path, "expected a JSON list")
            items.extend(data)
            if len(data) < PER_PAGE:
                return items
            page += 1
