from __future__ import annotations

import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from curl_cffi import requests as curl_requests

from .errors import FetchError
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_IMPERSONATE = "chrome120"


class PageFetcher:
    """Fetch one HTML page and parse it into a document tree.

    GitHub serves the package pages to browsers, so requests go through
    curl_cffi with browser impersonation.  A new session is opened per call;
    curl sessions are not shared between threads.  There are no retries here:
    any failure raises FetchError and the caller decides what to do.
    """

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = 20,
        impersonate: str = DEFAULT_IMPERSONATE,
        headers: Optional[Dict[str, str]] = None,
        parser: str = "html.parser",
    ) -> None:
        self._rate_limiter = rate_limiter
        self._timeout = timeout
        self._impersonate = impersonate
        self._headers = headers
        self._parser = parser

    def fetch(self, url: str) -> BeautifulSoup:
        if self._rate_limiter:
            self._rate_limiter.acquire()
        logger.debug("GET %s", url)
        try:
            with curl_requests.Session() as session:
                response = session.get(
                    url,
                    headers=self._headers,
                    impersonate=self._impersonate,
                    timeout=self._timeout,
                )
        except Exception as exc:  # noqa: BLE001
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        status_code = getattr(response, "status_code", None)
        if status_code is None or not 200 <= int(status_code) < 300:
            raise FetchError(url, f"HTTP {status_code}", status_code=status_code)

        body = response.text or ""
        if not body.strip():
            raise FetchError(url, "empty response body", status_code=status_code)
        try:
            return BeautifulSoup(body, self._parser)
        except ParserRejectedMarkup as exc:
            raise FetchError(url, f"unparseable body: {exc}", status_code=status_code) from exc
