from datetime import datetime, timezone

import pytest
import requests

from newsignal.fetchers import DEFAULT_ADAPTERS, fetch_http_entries, fetch_rss_entries
from newsignal.models import Source

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Wire</title>
    <item>
      <title>Exchange X halts withdrawals</title>
      <link>https://wire.example/halt</link>
      <description>&lt;p&gt;Users report frozen balances.&lt;/p&gt;</description>
      <pubDate>Sun, 18 Oct 2026 10:30:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated note</title>
      <link>https://wire.example/note</link>
    </item>
  </channel>
</rss>
"""

HTML = """<html><head><title> Exchange status </title>
<meta name="description" content="All withdrawals paused pending review.">
<meta property="article:published_time" content="2026-10-18T09:00:00Z">
</head><body><main>ignored</main></body></html>"""


class FakeResponse:
    def __init__(self, status_code=200, content=b"", text=""):
        self.status_code = status_code
        self.content = content
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response):
        def _get(url, headers=None, timeout=None):
            calls.append({"url": url, "headers": headers, "timeout": timeout})
            return response

        monkeypatch.setattr(requests, "get", _get)
        return calls

    return install


def test_rss_entries_carry_source_context(fake_get):
    calls = fake_get(FakeResponse(content=RSS))
    source = Source(
        name="Wire",
        url="https://wire.example/rss",
        type="rss",
        category_hints=["market"],
        assets=["BTC"],
        headers={"X-Token": "abc"},
    )

    items = fetch_rss_entries(source, timeout=7)

    assert calls[0]["timeout"] == 7
    assert calls[0]["headers"]["X-Token"] == "abc"
    assert [i.title for i in items] == ["Exchange X halts withdrawals", "Undated note"]
    first = items[0]
    assert first.timestamp == datetime(2026, 10, 18, 10, 30, tzinfo=timezone.utc)
    assert first.source == "Wire"
    assert first.raw_category_hint == "market"
    assert first.assets_hint == ["BTC"]
    assert "frozen balances" in first.summary
    assert items[1].timestamp is None


def test_rss_http_error_propagates(fake_get):
    fake_get(FakeResponse(status_code=503))
    with pytest.raises(requests.HTTPError):
        fetch_rss_entries(Source(name="Wire", url="https://wire.example/rss", type="rss"))


def test_http_page_becomes_one_item(fake_get):
    fake_get(FakeResponse(text=HTML))
    source = Source(name="Status", url="https://status.example/", type="http", assets=["ETH"])

    (item,) = fetch_http_entries(source)

    assert item.title == "Exchange status"
    assert item.summary == "All withdrawals paused pending review."
    assert item.timestamp == "2026-10-18T09:00:00Z"
    assert item.assets_hint == ["ETH"]


def test_adapters_reject_wrong_source_type():
    with pytest.raises(ValueError):
        fetch_http_entries(Source(name="Wire", url="https://wire.example/rss", type="rss"))
    assert set(DEFAULT_ADAPTERS) == {"rss", "http"}
