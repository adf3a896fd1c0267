"""
Unit tests for chart repository index fetching and parsing
"""

import threading
import unittest
from unittest.mock import patch
import sys
import os

import httpx

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chart_watch.exceptions import IndexFetchError, IndexParseError
from chart_watch.index import fetch_index, index_url, parse_index

INDEX_YAML = """
apiVersion: v1
entries:
  promtail:
    - version: 6.9.1
      appVersion: 2.7.4
      name: promtail
    - version: 6.7.0
      appVersion: 2.7.0
    - appVersion: 2.6.0
  loki:
    - version: "4.6.2"
generated: "2023-02-01T10:00:00Z"
"""


class TestParseIndex(unittest.TestCase):
    """Test index.yaml parsing"""

    def test_entries_keep_published_order(self):
        index = parse_index(INDEX_YAML)
        self.assertEqual(index.versions("promtail"), ("6.9.1", "6.7.0"))
        self.assertEqual(index.releases("promtail")[0].app_version, "2.7.4")
        self.assertEqual(index.releases("promtail")[0].metadata["name"], "promtail")
        self.assertEqual(index.versions("loki"), ("4.6.2",))

    def test_missing_chart(self):
        index = parse_index(INDEX_YAML)
        self.assertNotIn("grafana", index)
        self.assertEqual(index.releases("grafana"), ())

    def test_numeric_versions_are_strings(self):
        index = parse_index("entries:\n  foo:\n    - version: 1.2\n")
        self.assertEqual(index.versions("foo"), ("1.2",))

    def test_invalid_documents(self):
        for text in ("entries: [", "just a string", "apiVersion: v1", "entries: []"):
            with self.subTest(text=text):
                with self.assertRaises(IndexParseError):
                    parse_index(text)


class TestFetchIndex(unittest.IsolatedAsyncioTestCase):
    """Test index download"""

    def test_index_url(self):
        self.assertEqual(
            index_url("https://grafana.github.io/helm-charts/"),
            "https://grafana.github.io/helm-charts/index.yaml",
        )

    async def test_fetch(self):
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, text=INDEX_YAML)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            index = await fetch_index("https://charts.example.com", client)

        self.assertEqual(requested, ["https://charts.example.com/index.yaml"])
        self.assertIn("promtail", index)

    async def test_parse_runs_off_the_event_loop(self):
        parsed_on = []

        def record_thread(text):
            parsed_on.append(threading.current_thread())
            return parse_index(text)

        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=INDEX_YAML))
        async with httpx.AsyncClient(transport=transport) as client:
            with patch("chart_watch.index.parse_index", side_effect=record_thread):
                index = await fetch_index("https://charts.example.com", client)

        self.assertIn("promtail", index)
        self.assertEqual(len(parsed_on), 1)
        self.assertIsNot(parsed_on[0], threading.current_thread())

    async def test_non_success_response(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, text="not found"))
        async with httpx.AsyncClient(transport=transport) as client:
            with self.assertRaises(IndexFetchError):
                await fetch_index("https://charts.example.com", client)

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(IndexFetchError):
                await fetch_index("https://charts.example.com", client)

    async def test_malformed_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        async with httpx.AsyncClient(transport=transport) as client:
            with self.assertRaises(IndexParseError):
                await fetch_index("https://charts.example.com", client)


if __name__ == "__main__":
    unittest.main()
