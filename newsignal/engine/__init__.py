"""Read-side engines: filtered news, briefings and alert windows."""

from .alerts import AlertService
from .briefing import BriefingSynthesizer, SynthesisUnavailable
from .query import ALL_ASSETS, ALL_CATEGORIES, InvalidQuery, QueryEngine, resolve_asset, resolve_category
from .service import NewsSignalEngine

__all__ = [
    "AlertService",
    "BriefingSynthesizer",
    "SynthesisUnavailable",
    "QueryEngine",
    "InvalidQuery",
    "resolve_asset",
    "resolve_category",
    "ALL_ASSETS",
    "ALL_CATEGORIES",
    "NewsSignalEngine",
]
