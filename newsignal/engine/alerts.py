from __future__ import annotations

from datetime import timedelta
from typing import Optional

from ..models import AlertWindow
from ..store import ArticleStore, QueryFilter
from ..utils.logging import get_logger
from .query import Clock, InvalidQuery, resolve_asset, utc_now

logger = get_logger("nse.engine.alerts")


class AlertService:
    """Trailing high-impact window, recomputed against the store on every call."""

    def __init__(self, store: ArticleStore, *, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def get_alerts(self, asset: Optional[str], minutes: int, min_impact: int) -> AlertWindow:
        now = self.clock()
        window = AlertWindow(generated_at=now, minutes=minutes, min_impact=min_impact, alerts=[])
        try:
            asset_filter = resolve_asset(asset)
        except InvalidQuery:
            return window
        if minutes <= 0:
            return window

        hits = self.store.query(
            QueryFilter(asset=asset_filter, since=now - timedelta(minutes=minutes), min_impact=min_impact)
        )
        hits.sort(key=lambda a: (a.impact_score, a.timestamp), reverse=True)
        logger.debug("Alerts asset=%s minutes=%s min_impact=%s -> %d", asset, minutes, min_impact, len(hits))
        return AlertWindow(generated_at=now, minutes=minutes, min_impact=min_impact, alerts=hits)
