"""Typed models used across the application."""

from .source import Source, SourceType
from .article import (
    CATEGORIES,
    IMPORTANCE_LEVELS,
    SENTIMENTS,
    Article,
    Category,
    Importance,
    RawArticle,
    Sentiment,
)
from .briefing import AlertWindow, Briefing

__all__ = [
    "Source",
    "SourceType",
    "Article",
    "RawArticle",
    "Category",
    "Sentiment",
    "Importance",
    "CATEGORIES",
    "SENTIMENTS",
    "IMPORTANCE_LEVELS",
    "Briefing",
    "AlertWindow",
]
