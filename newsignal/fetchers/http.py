from __future__ import annotations

from typing import Dict, List
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from ..models import RawArticle, Source
from ..utils.logging import get_logger

logger = get_logger("nse.fetchers.http")


_DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    )
}

_TIME_META = (
    ("property", "article:published_time"),
    ("name", "pubdate"),
    ("name", "date"),
)


def _validated_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL for HTTP fetch: {url}")
    return url


def fetch_http_entries(source: Source, *, timeout: int = 30) -> List[RawArticle]:
    """Fetch a single HTML page and map it to one raw article."""
    if source.type != "http":
        raise ValueError("fetch_http_entries requires a source of type 'http'")

    headers = {**_DEFAULT_HEADERS, **(source.headers or {})}
    url = _validated_url(source.url)
    logger.debug("Fetching HTTP content from %s", url)
    resp = requests.get(url, headers=headers, timeout=timeout)
    if resp.status_code >= 400:
        logger.warning("HTTP fetch failed (%s): %s", resp.status_code, source.url)
        resp.raise_for_status()

    soup = BeautifulSoup(resp.text, "html.parser")

    title = soup.title.string.strip() if soup.title and soup.title.string else source.name
    meta_desc = soup.find("meta", attrs={"name": "description"})
    description = meta_desc["content"].strip() if meta_desc and meta_desc.get("content") else None
    if not description:
        main = soup.find("main") or soup.body
        description = " ".join(main.get_text(" ", strip=True).split()[:80]) if main else ""

    published = None
    for attr, value in _TIME_META:
        tag = soup.find("meta", attrs={attr: value})
        if tag and tag.get("content"):
            published = tag["content"].strip()
            break
    if published is None:
        time_tag = soup.find("time")
        if time_tag and time_tag.get("datetime"):
            published = time_tag["datetime"].strip()

    logger.info("Fetched HTTP page: %s", source.name)
    return [
        RawArticle(
            title=title,
            summary=description,
            url=source.url,
            source=source.name,
            timestamp=published,
            raw_category_hint=source.category_hints[0] if source.category_hints else None,
            assets_hint=list(source.assets),
        )
    ]
