"""Tests for version-entry and download-summary extraction."""

import unittest

from download_metrics.extractor import VersionListLayout, extract_download_summary, extract_entries
from download_metrics.models import DownloadSummary, VersionEntry

from listing_pages import EMPTY_PAGE, listing_page, soup, version_item


class TestExtractEntries(unittest.TestCase):
    """Verify rows are turned into VersionEntry records."""

    def test_tags_and_count_per_row(self):
        doc = soup(listing_page([
            version_item(["v1.0"], "10"),
            version_item(["latest", "v1.1"], "1,234"),
        ]))
        entries = extract_entries(doc)
        self.assertEqual(len(entries), 2)
        self.assertEqual(entries[0].tags, ("v1.0",))
        self.assertEqual(entries[0].count_text.strip(), "10")
        self.assertEqual(entries[1].tags, ("latest", "v1.1"))
        self.assertEqual(entries[1].count_text.strip(), "1,234")

    def test_digest_only_row_has_no_tags(self):
        """The digest is not a tag anchor, so an untagged row has an empty tag set."""
        entries = extract_entries(soup(listing_page([version_item([], "7")])))
        self.assertEqual(entries[0].tags, ())
        self.assertEqual(entries[0].count_text.strip(), "7")

    def test_missing_count_is_none(self):
        entries = extract_entries(soup(listing_page([version_item(["v2"])])))
        self.assertIsNone(entries[0].count_text)

    def test_icon_only_span_is_none(self):
        html = listing_page([version_item(["v2"], "")])
        entries = extract_entries(soup(html))
        self.assertIsNone(entries[0].count_text)

    def test_empty_list_returns_no_entries(self):
        self.assertEqual(extract_entries(soup(EMPTY_PAGE)), [])

    def test_missing_container_returns_no_entries(self):
        """A page that does not match the layout degrades to an empty result."""
        doc = soup("<html><body><ul><li><div><div><div><a>v1</a></div></div></div></li></ul></body></html>")
        self.assertEqual(extract_entries(doc), [])

    def test_empty_row_degenerates_to_empty_entry(self):
        doc = soup('<div id="versions-list"><ul><li></li></ul></div>')
        self.assertEqual(extract_entries(doc), [VersionEntry()])

    def test_custom_layout(self):
        """Selectors can be swapped without touching the rest of the pipeline."""
        layout = VersionListLayout(items="table.versions tr", tags=":scope > td.tags > a", count=":scope > td.n")
        doc = soup(
            '<table class="versions"><tr><td class="tags"><a>v9</a></td><td class="n">3</td></tr></table>'
        )
        self.assertEqual(extract_entries(doc, layout), [VersionEntry(tags=("v9",), count_text="3")])


class TestExtractDownloadSummary(unittest.TestCase):
    """Verify the package overview totals are read from label/value spans."""

    def test_reads_all_periods(self):
        doc = soup(
            "<div>"
            "<span>Total downloads</span><span> 12,345 </span>"
            "<span>Last 30 days</span><span>1,000</span>"
            "<span>Last week</span><span>250</span>"
            "<span>Today</span><span>\n 3\n</span>"
            "</div>"
        )
        self.assertEqual(
            extract_download_summary(doc),
            DownloadSummary(total=12345, last_30_days=1000, last_week=250, today=3),
        )

    def test_missing_and_unreadable_values_stay_zero(self):
        doc = soup("<span>Total downloads</span><span>2.8K</span><span>Today</span><span>4</span>")
        with self.assertLogs("download_metrics.extractor", level="WARNING"):
            summary = extract_download_summary(doc)
        self.assertEqual(summary, DownloadSummary(today=4))


if __name__ == "__main__":
    unittest.main()
