"""Content fetching layer for RSS and HTTP sources."""

from typing import Callable, Dict, List

from ..models import RawArticle, Source
from .rss import fetch_rss_entries
from .http import fetch_http_entries

# Adapter contract: fetch one source, return raw items, raise on failure.
SourceAdapter = Callable[..., List[RawArticle]]

DEFAULT_ADAPTERS: Dict[str, SourceAdapter] = {
    "rss": fetch_rss_entries,
    "http": fetch_http_entries,
}

__all__ = ["fetch_rss_entries", "fetch_http_entries", "SourceAdapter", "DEFAULT_ADAPTERS"]
