from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import requests

from ..models import RawArticle, Source
from ..utils.logging import get_logger

logger = get_logger("nse.fetchers.rss")


_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    )
}


def _parse_datetime(entry: dict) -> Optional[datetime]:
    # feedparser normalizes to UTC struct_time in 'published_parsed' / 'updated_parsed'
    for key in ("published_parsed", "updated_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def fetch_rss_entries(source: Source, *, timeout: int = 30) -> List[RawArticle]:
    """Fetch and parse RSS/Atom feed entries into raw articles.

    The network request is done with ``requests`` for consistent timeouts and
    headers; the body is parsed by ``feedparser``. Request errors propagate so
    the pipeline can count the source as failed.
    """
    if source.type != "rss":
        raise ValueError("fetch_rss_entries requires a source of type 'rss'")

    logger.debug("Fetching RSS from %s", source.url)
    headers = {**_DEFAULT_HEADERS, **(source.headers or {})}
    try:
        resp = requests.get(source.url, headers=headers, timeout=timeout)
        if resp.status_code >= 400:
            logger.warning("RSS fetch failed (%s): %s", resp.status_code, source.url)
            resp.raise_for_status()
        parsed = feedparser.parse(resp.content)
    except requests.RequestException as exc:
        logger.warning("RSS request error for %s: %s", source.url, exc)
        raise

    if getattr(parsed, "bozo", False):
        # feedparser sets bozo on malformed feeds but may still parse entries
        logger.debug("Feed 'bozo' flagged for %s: %s", source.url, getattr(parsed, "bozo_exception", None))

    hint = source.category_hints[0] if source.category_hints else None
    items: List[RawArticle] = []
    for entry in getattr(parsed, "entries", []) or []:
        title = getattr(entry, "title", None) or ""
        link = getattr(entry, "link", None) or ""
        summary = getattr(entry, "summary", None) or ""
        if not summary:
            contents = getattr(entry, "content", None)
            if contents and isinstance(contents, list):
                summary = contents[0].get("value") or ""

        items.append(
            RawArticle(
                title=title,
                summary=summary,
                url=link,
                source=source.name,
                timestamp=_parse_datetime(entry),
                raw_category_hint=hint,
                assets_hint=list(source.assets),
            )
        )

    logger.info("Fetched %d RSS entries from %s", len(items), source.name)
    return items
