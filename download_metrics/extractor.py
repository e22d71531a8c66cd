"""Locate package versions inside a parsed container-versions page.

The listing has no public API, so everything here depends on the page
markup.  Selectors are kept together in :class:`VersionListLayout`; when the
markup changes only the layout needs to follow, classification and count
parsing do not.  A page that no longer matches the layout yields no entries
instead of raising.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .counts import parse_count
from .errors import CountParseError
from .models import DownloadSummary, VersionEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionListLayout:
    items: str = "#versions-list > ul > li"
    # Relative to one item.
    tags: str = ":scope > div > div:nth-of-type(1) > div:nth-of-type(1) > a"
    count: str = ":scope > div > div:nth-of-type(2) > span"


DEFAULT_LAYOUT = VersionListLayout()

SUMMARY_LABELS = {
    "Total downloads": "total",
    "Last 30 days": "last_30_days",
    "Last week": "last_week",
    "Today": "today",
}


def extract_entries(doc: BeautifulSoup, layout: VersionListLayout = DEFAULT_LAYOUT) -> List[VersionEntry]:
    """Return one VersionEntry per row of the versions list, in page order."""
    return [_entry_from_item(item, layout) for item in doc.select(layout.items)]


def _entry_from_item(item: Tag, layout: VersionListLayout) -> VersionEntry:
    tags = tuple(a.get_text() for a in item.select(layout.tags))
    return VersionEntry(tags=tags, count_text=_count_text(item, layout))


def _count_text(item: Tag, layout: VersionListLayout) -> Optional[str]:
    # The count is the text next to the download icon, so look at the span's
    # own text nodes and take the last non-blank one.
    for span in item.select(layout.count):
        texts = [s for s in span.find_all(string=True, recursive=False) if s.strip()]
        if texts:
            return str(texts[-1])
    return None


def extract_download_summary(doc: BeautifulSoup) -> DownloadSummary:
    """Read the download totals shown on a package overview page.

    Each total is the span that follows its label span.  Totals that are
    missing or unreadable are left at zero.
    """
    values = {}
    spans = doc.find_all("span")
    for label_span, value_span in zip(spans, spans[1:]):
        key = SUMMARY_LABELS.get(label_span.get_text(strip=True))
        if key is None or key in values:
            continue
        text = value_span.get_text()
        try:
            values[key] = parse_count(text)
        except CountParseError:
            logger.warning("Unreadable %r value on package page: %r", key, text)
    return DownloadSummary(**values)
