from __future__ import annotations

import re
from datetime import timedelta
from typing import List, Optional

from ..models import CATEGORIES, Article
from ..store import ArticleStore, QueryFilter
from ..utils.clock import Clock, utc_now

ALL_ASSETS = "ALL"
ALL_CATEGORIES = "all"

_TICKER_RE = re.compile(r"^[A-Z0-9]{2,10}$")


class InvalidQuery(ValueError):
    """A filter value the engine cannot match; callers map it to an empty result."""


def resolve_asset(asset: Optional[str]) -> Optional[str]:
    """Map a request asset to a store filter value.

    ``"ALL"`` (any case) means no asset filter and returns ``None``; a
    ticker-shaped value returns the uppercase ticker. Anything else raises
    :class:`InvalidQuery`.
    """
    value = (asset or "").strip().upper()
    if value == ALL_ASSETS:
        return None
    if not _TICKER_RE.match(value):
        raise InvalidQuery(f"Unrecognized asset: {asset!r}")
    return value


def resolve_category(category: Optional[str]) -> Optional[str]:
    value = (category or ALL_CATEGORIES).strip().lower()
    if value == ALL_CATEGORIES:
        return None
    if value not in CATEGORIES:
        raise InvalidQuery(f"Unrecognized category: {category!r}")
    return value


class QueryEngine:
    def __init__(self, store: ArticleStore, *, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def list_news(
        self,
        asset: Optional[str],
        category: Optional[str] = ALL_CATEGORIES,
        hours: Optional[float] = None,
        limit: Optional[int] = None,
        q: Optional[str] = None,
    ) -> List[Article]:
        """Filtered read over the store, newest first.

        Unrecognized asset or category values and non-positive windows or
        limits yield an empty list rather than an error.
        """
        try:
            asset_filter = resolve_asset(asset)
            category_filter = resolve_category(category)
        except InvalidQuery:
            return []
        if hours is not None and hours <= 0:
            return []
        if limit is not None and limit <= 0:
            return []

        since = self.clock() - timedelta(hours=hours) if hours is not None else None
        text = (q or "").strip() or None
        return self.store.query(
            QueryFilter(asset=asset_filter, category=category_filter, since=since, text=text, limit=limit)
        )
