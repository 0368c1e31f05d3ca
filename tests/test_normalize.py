from datetime import datetime, timedelta, timezone

from newsignal.models import RawArticle
from newsignal.processors.normalize import (
    clean_html_to_text,
    normalize_plain_text,
    normalize_raw_article,
    parse_timestamp,
)


def test_clean_html_strips_tags_and_entities():
    assert clean_html_to_text("<p>ETF &amp; <b>SEC</b></p>") == "ETF & SEC"
    assert clean_html_to_text("plain &amp; simple") == "plain & simple"
    assert clean_html_to_text(None) == ""


def test_normalize_plain_text_punctuation_and_whitespace():
    assert normalize_plain_text("\ufeff\u201cHalt\u201d \u2014  now ") == '"Halt" - now'


def test_parse_timestamp_formats_are_utc():
    expected = datetime(2026, 10, 18, 10, 30, tzinfo=timezone.utc)
    assert parse_timestamp("2026-10-18T10:30:00Z") == expected
    assert parse_timestamp("2026-10-18T12:30:00+02:00") == expected
    assert parse_timestamp("Sun, 18 Oct 2026 10:30:00 GMT") == expected
    assert parse_timestamp(datetime(2026, 10, 18, 10, 30)) == expected
    assert parse_timestamp("18.10.2026") == datetime(2026, 10, 18, tzinfo=timezone.utc)


def test_parse_timestamp_rejects_garbage():
    assert parse_timestamp("yesterday-ish") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None


def test_normalize_raw_article_uses_fetch_time_when_missing():
    fetched = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    raw = RawArticle(
        title="  <b>Ripple</b> wins appeal ",
        summary="<p>Court rules</p>",
        url=" https://x.example/a ",
        source="Wire",
        raw_category_hint=" Regulation ",
        assets_hint=["xrp", " "],
    )
    out = normalize_raw_article(raw, fetched_at=fetched)
    assert out.title == "Ripple wins appeal"
    assert out.summary == "Court rules"
    assert out.url == "https://x.example/a"
    assert out.timestamp == fetched
    assert out.raw_category_hint == "regulation"
    assert out.assets_hint == ["XRP"]


def test_normalize_raw_article_converts_timezones():
    fetched = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    local = datetime(2026, 10, 18, 9, 0, tzinfo=timezone(timedelta(hours=-3)))
    raw = RawArticle(title="t", summary="s", url="u", source="s", timestamp=local)
    assert normalize_raw_article(raw, fetched_at=fetched).timestamp == fetched
