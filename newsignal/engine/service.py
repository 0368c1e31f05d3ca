from __future__ import annotations

from typing import List, Optional

from ..models import AlertWindow, Article, Briefing
from ..processors.narrative import Narrator, create_narrator
from ..processors.scoring import Scorer
from ..store import ArticleStore
from ..utils.settings import EngineSettings
from .alerts import AlertService
from .briefing import BriefingSynthesizer
from .query import ALL_CATEGORIES, Clock, QueryEngine, utc_now


class NewsSignalEngine:
    """Read-side facade over the store: news listing, briefings and alerts."""

    def __init__(
        self,
        *,
        settings: EngineSettings | None = None,
        store: ArticleStore | None = None,
        scorer: Scorer | None = None,
        narrator: Optional[Narrator] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.store = store if store is not None else ArticleStore()
        self.scorer = scorer or Scorer()
        self.clock = clock
        self.query = QueryEngine(self.store, clock=clock)
        self.briefings = BriefingSynthesizer(
            self.query,
            narrator=narrator,
            ttl_seconds=self.settings.briefing_ttl_seconds,
            ai_timeout=self.settings.briefing_ai_timeout,
            high_impact_count=self.settings.briefing_high_impact_count,
            clock=clock,
        )
        self.alerts = AlertService(self.store, clock=clock)

    @classmethod
    def from_settings(cls, settings: EngineSettings, *, clock: Clock = utc_now) -> "NewsSignalEngine":
        return cls(settings=settings, narrator=create_narrator(settings), clock=clock)

    def list_news(
        self,
        asset: Optional[str],
        category: Optional[str] = ALL_CATEGORIES,
        hours: Optional[float] = None,
        limit: Optional[int] = None,
        q: Optional[str] = None,
    ) -> List[Article]:
        return self.query.list_news(asset, category, hours, limit, q)

    def get_briefing(self, asset: Optional[str], hours: int) -> Briefing:
        return self.briefings.get_briefing(asset, hours)

    def get_alerts(self, asset: Optional[str], minutes: int, min_impact: int) -> AlertWindow:
        return self.alerts.get_alerts(asset, minutes, min_impact)

    def close(self) -> None:
        self.briefings.close()
