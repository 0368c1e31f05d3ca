from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from newsignal.engine import NewsSignalEngine
from newsignal.models import Article
from newsignal.processors.dedup import article_id
from newsignal.store import ArticleStore
from newsignal.utils.settings import EngineSettings

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> ArticleStore:
    return ArticleStore()


@pytest.fixture
def make_article(clock):
    def _make(
        title: str = "Bitcoin steady ahead of data",
        *,
        minutes_ago: float = 10,
        source: str = "Wire",
        summary: str = "",
        assets=("BTC",),
        category: str = "market",
        sentiment: str = "neutral",
        importance: str = "medium",
        impact: int = 50,
        volatility: int = 40,
        bias: float = 0.0,
        reasons=(),
    ) -> Article:
        ts = clock() - timedelta(minutes=minutes_ago)
        return Article(
            id=article_id(title, source, ts),
            title=title,
            summary=summary or f"{title}.",
            url=f"https://news.example/{abs(hash(title)) % 10_000}",
            source=source,
            timestamp=ts,
            category=category,
            assets=tuple(assets),
            sentiment=sentiment,
            importance=importance,
            impact_score=impact,
            volatility_score=volatility,
            bias_score=bias,
            reasons=tuple(reasons),
        )

    return _make


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(briefing_ttl_seconds=45, briefing_ai_timeout=0.5, for_you_asset="ETH")


@pytest.fixture
def engine(store, clock, settings):
    eng = NewsSignalEngine(settings=settings, store=store, clock=clock)
    yield eng
    eng.close()
