"""Pydantic response models for the news API.

Field names follow the JSON contract consumed by the dashboard (camelCase).
"""

from typing import List, Literal, Optional

from pydantic import BaseModel


class ArticleOut(BaseModel):
    id: str
    title: str
    summary: str
    sentiment: Literal["bullish", "bearish", "neutral"]
    category: str
    assets: List[str] = []
    timestamp: str
    source: str
    importance: Literal["high", "medium", "low"]
    url: str
    impactScore: int
    volatilityScore: int
    biasScore: float
    reasons: List[str] = []


class BriefingOut(BaseModel):
    generatedAt: str
    asset: str
    hours: int
    posture: str
    sentiment: Literal["bullish", "bearish", "neutral"]
    impactScore: int
    volatilityScore: int
    aiUsed: bool
    briefing: str
    strategyHints: List[str] = []
    highImpact: List[ArticleOut] = []
    disclaimer: str


class AlertsOut(BaseModel):
    generatedAt: str
    minutes: int
    minImpact: int
    alerts: List[ArticleOut] = []


class SourceStatus(BaseModel):
    source: str
    fetched: int
    inserted: int
    replaced: int
    duplicates: int
    filtered: int
    invalid: int
    degraded: int
    failed: bool
    error: Optional[str] = None
    finishedAt: Optional[str] = None


class HealthOut(BaseModel):
    status: str
    timestamp: str
    articles: int
    scheduler: bool
    sources: List[SourceStatus] = []
