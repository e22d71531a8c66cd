"""Walk every page of a container-versions listing and total the downloads.

The listing reports neither a page count nor a next link, so a run keeps
requesting ``?page=<n>`` until a page comes back with no version rows at all.
A page holding only digest-only rows still has rows and does not end the run.

Each call owns its own :class:`PaginationState` and accumulator, so one
driver may serve several repositories from different threads.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from .classifier import classify
from .counts import parse_count
from .errors import CountParseError, MissingLabelError, PaginationError, PaginationLimitExceeded
from .extractor import DEFAULT_LAYOUT, VersionListLayout, extract_entries
from .models import PageResult, PaginationPhase, PaginationState, VersionEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 100
PAGE_PARAM = "page"


class Fetcher(Protocol):
    def fetch(self, url: str) -> BeautifulSoup:
        ...


@dataclass
class PaginationRun:
    counts: Dict[str, int]
    state: PaginationState
    pages_fetched: int
    error: Optional[PaginationError] = None

    @property
    def success(self) -> bool:
        return self.error is None


def page_url(base_url: str, page: int) -> str:
    """Return base_url with its ``page`` query parameter set to ``page``."""
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != PAGE_PARAM]
    query.append((PAGE_PARAM, str(page)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def summarize_page(page: int, url: str, entries: List[VersionEntry]) -> PageResult:
    """Classify and count the entries of one page.

    Digest-only entries are dropped silently.  Entries with no usable label
    or an unreadable count are logged and skipped; they never fail the page.
    """
    counts: Dict[str, int] = {}
    skipped = 0
    for entry in entries:
        try:
            label = classify(entry)
        except MissingLabelError as exc:
            logger.warning("Skipping entry on %s: %s", url, exc)
            skipped += 1
            continue
        if label is None:
            continue
        try:
            counts[label] = parse_count(entry.count_text)
        except CountParseError as exc:
            logger.warning("Skipping %r on %s: %s", label, url, exc)
            skipped += 1
    return PageResult(
        page=page,
        url=url,
        counts=MappingProxyType(counts),
        entries_seen=len(entries),
        skipped=skipped,
    )


class PaginationDriver:
    """Drive Fetching -> Extracting -> Merging until an empty page or an error.

    ``max_pages`` bounds how many pages may carry entries; a listing that
    still has rows on page ``max_pages + 1`` raises PaginationLimitExceeded.
    Zero disables the bound.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        max_pages: int = DEFAULT_MAX_PAGES,
        layout: VersionListLayout = DEFAULT_LAYOUT,
    ) -> None:
        if max_pages < 0:
            raise ValueError("max_pages must be >= 0")
        self._fetcher = fetcher
        self._max_pages = max_pages
        self._layout = layout

    def iter_pages(self, base_url: str, state: Optional[PaginationState] = None) -> Iterator[PageResult]:
        """Yield one PageResult per non-empty page, in page order.

        The caller merges each result before the next page is requested.
        ``state`` is updated in place when given.
        """
        if state is None:
            state = PaginationState(url=base_url)
        while True:
            state.phase = PaginationPhase.FETCHING
            try:
                doc = self._fetcher.fetch(state.url)
            except PaginationError:
                state.phase = PaginationPhase.FAILED
                raise

            state.phase = PaginationPhase.EXTRACTING
            entries = extract_entries(doc, self._layout)
            if not entries:
                logger.debug("No versions on page %d of %s", state.page, base_url)
                state.phase = PaginationPhase.DONE
                return
            if self._max_pages and state.page > self._max_pages:
                state.phase = PaginationPhase.FAILED
                raise PaginationLimitExceeded(base_url, self._max_pages)

            state.phase = PaginationPhase.MERGING
            result = summarize_page(state.page, state.url, entries)
            logger.debug(
                "Page %d of %s: %d entries, %d versions, %d skipped",
                result.page, base_url, result.entries_seen, len(result.counts), result.skipped,
            )
            yield result

            state.page += 1
            state.url = page_url(base_url, state.page)

    def collect(self, base_url: str) -> Dict[str, int]:
        """Return the download count of every tagged version in the listing.

        A label seen on several pages keeps the value from the latest page.
        On failure the raised PaginationError carries the partial counts.
        """
        run = self.run(base_url)
        if run.error is not None:
            raise run.error
        return run.counts

    def run(self, base_url: str) -> PaginationRun:
        """Like collect() but report failures in the returned PaginationRun."""
        state = PaginationState(url=base_url)
        counts: Dict[str, int] = {}
        pages = 0
        try:
            for result in self.iter_pages(base_url, state):
                counts.update(result.counts)
                pages += 1
        except PaginationError as exc:
            exc.partial = dict(counts)
            exc.pages_fetched = pages
            logger.warning("Pagination of %s stopped on page %d: %s", base_url, state.page, exc)
            return PaginationRun(counts=counts, state=state, pages_fetched=pages, error=exc)
        logger.info("Collected %d versions from %d pages of %s", len(counts), pages, base_url)
        return PaginationRun(counts=counts, state=state, pages_fetched=pages)
