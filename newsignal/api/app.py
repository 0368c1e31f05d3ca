"""FastAPI application exposing the news, briefing and alert endpoints."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request

from ..engine import NewsSignalEngine
from ..models.article import format_timestamp
from ..pipeline.ingestion import IngestionPipeline, IngestionScheduler
from ..utils.logging import get_logger
from .schemas import AlertsOut, ArticleOut, BriefingOut, HealthOut

logger = get_logger("nse.api")

FOR_YOU = "FOR_YOU"

DEFAULT_NEWS_HOURS = 48
DEFAULT_NEWS_LIMIT = 50
DEFAULT_BRIEFING_HOURS = 24
DEFAULT_ALERT_MINUTES = 180
DEFAULT_MIN_IMPACT = 75
MAX_HOURS = 24 * 30
MAX_MINUTES = 60 * 24 * 7

router = APIRouter()


def get_engine(request: Request) -> NewsSignalEngine:
    return request.app.state.engine


def _int_param(value: Optional[str], default: int, lo: int, hi: int) -> int:
    """Lenient integer parsing: malformed -> default, out of range -> clamped."""
    if value is None or not str(value).strip():
        return default
    try:
        parsed = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(lo, min(hi, parsed))


def _resolve_asset(asset: Optional[str], engine: NewsSignalEngine) -> str:
    # "For you" is a dashboard notion; map it to the configured ticker here
    value = (asset or "ALL").strip()
    if value.upper() == FOR_YOU:
        return engine.settings.for_you_asset
    return value


@router.get("/news", response_model=List[ArticleOut])
def list_news(
    asset: Optional[str] = Query("ALL", description="Ticker, 'ALL' or 'FOR_YOU'"),
    category: Optional[str] = Query("all", description="Category or 'all'"),
    hours: Optional[str] = Query(None, description="Trailing window in hours"),
    limit: Optional[str] = Query(None, description="Maximum number of articles"),
    q: Optional[str] = Query(None, description="Case-insensitive search over title and summary"),
    engine: NewsSignalEngine = Depends(get_engine),
):
    articles = engine.list_news(
        _resolve_asset(asset, engine),
        category,
        _int_param(hours, DEFAULT_NEWS_HOURS, 0, MAX_HOURS),
        _int_param(limit, DEFAULT_NEWS_LIMIT, 0, engine.settings.max_limit),
        q,
    )
    return [a.to_dict() for a in articles]


@router.get("/news/briefing", response_model=BriefingOut)
def get_briefing(
    asset: Optional[str] = Query("ALL", description="Ticker, 'ALL' or 'FOR_YOU'"),
    hours: Optional[str] = Query(None, description="Trailing window in hours"),
    engine: NewsSignalEngine = Depends(get_engine),
):
    briefing = engine.get_briefing(
        _resolve_asset(asset, engine),
        _int_param(hours, DEFAULT_BRIEFING_HOURS, 0, MAX_HOURS),
    )
    return briefing.to_dict()


@router.get("/news/alerts", response_model=AlertsOut)
def get_alerts(
    asset: Optional[str] = Query("ALL", description="Ticker, 'ALL' or 'FOR_YOU'"),
    minutes: Optional[str] = Query(None, description="Trailing window in minutes"),
    minImpact: Optional[str] = Query(None, description="Impact score floor (0-100)"),
    engine: NewsSignalEngine = Depends(get_engine),
):
    window = engine.get_alerts(
        _resolve_asset(asset, engine),
        _int_param(minutes, DEFAULT_ALERT_MINUTES, 0, MAX_MINUTES),
        _int_param(minImpact, DEFAULT_MIN_IMPACT, 0, 100),
    )
    return window.to_dict()


@router.get("/health", response_model=HealthOut)
def health(request: Request, engine: NewsSignalEngine = Depends(get_engine)):
    pipeline: Optional[IngestionPipeline] = request.app.state.pipeline
    scheduler: Optional[IngestionScheduler] = request.app.state.scheduler
    sources = pipeline.last_reports if pipeline is not None else []
    return {
        "status": "healthy",
        "timestamp": format_timestamp(datetime.now(timezone.utc)),
        "articles": len(engine.store),
        "scheduler": bool(scheduler and scheduler.running),
        "sources": [s.to_dict() for s in sorted(sources, key=lambda s: s.source)],
    }


def create_app(
    engine: NewsSignalEngine,
    *,
    pipeline: Optional[IngestionPipeline] = None,
    scheduler: Optional[IngestionScheduler] = None,
) -> FastAPI:
    """Build the API around an engine; the scheduler follows the app lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop()
            engine.close()
            logger.info("News API shut down")

    app = FastAPI(title="News Signal Engine", lifespan=lifespan)
    app.state.engine = engine
    app.state.pipeline = pipeline
    app.state.scheduler = scheduler
    app.include_router(router)
    # the dashboard calls the same routes under /api
    app.include_router(router, prefix="/api")
    return app
