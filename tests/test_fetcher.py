"""Tests for the PageFetcher class."""

import unittest
from unittest import mock

from download_metrics.errors import FetchError
from download_metrics.fetcher import PageFetcher
from download_metrics.rate_limiter import RateLimiter

from listing_pages import listing_page, version_item

URL = "https://github.com/acme/widget/pkgs/container/widget/versions"


def _response(status_code=200, text=""):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.text = text
    return resp


class TestPageFetcher(unittest.TestCase):
    """Verify fetch() parses good pages and wraps every failure in FetchError."""

    def setUp(self):
        patcher = mock.patch("download_metrics.fetcher.curl_requests.Session")
        self.session_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.session = self.session_cls.return_value.__enter__.return_value

    def test_returns_parsed_document(self):
        self.session.get.return_value = _response(200, listing_page([version_item(["v1"], "3")]))
        doc = PageFetcher().fetch(URL)
        self.assertEqual(len(doc.select("#versions-list > ul > li")), 1)

    def test_passes_impersonation_and_timeout(self):
        self.session.get.return_value = _response(200, "<html></html>")
        PageFetcher(timeout=5, impersonate="chrome110").fetch(URL)
        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["impersonate"], "chrome110")
        self.assertEqual(kwargs["timeout"], 5)

    def test_non_success_status_raises(self):
        self.session.get.return_value = _response(404, "Not Found")
        with self.assertRaises(FetchError) as ctx:
            PageFetcher().fetch(URL)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.url, URL)
        self.assertIn(URL, str(ctx.exception))

    def test_transport_error_raises(self):
        self.session.get.side_effect = ConnectionError("connection reset")
        with self.assertRaises(FetchError) as ctx:
            PageFetcher().fetch(URL)
        self.assertIsNone(ctx.exception.status_code)
        self.assertIn("ConnectionError", str(ctx.exception))

    def test_empty_body_raises(self):
        self.session.get.return_value = _response(200, "  \n")
        with self.assertRaises(FetchError):
            PageFetcher().fetch(URL)

    def test_empty_listing_is_not_an_error(self):
        """A valid page without versions parses fine; emptiness is decided later."""
        self.session.get.return_value = _response(200, listing_page([]))
        doc = PageFetcher().fetch(URL)
        self.assertEqual(doc.select("#versions-list > ul > li"), [])

    def test_acquires_rate_limiter(self):
        self.session.get.return_value = _response(200, "<html></html>")
        limiter = mock.Mock(spec=RateLimiter)
        PageFetcher(rate_limiter=limiter).fetch(URL)
        limiter.acquire.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
