from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple, Union

Category = Literal["market", "regulation", "technology", "defi", "security", "adoption", "other"]
Sentiment = Literal["bullish", "bearish", "neutral"]
Importance = Literal["high", "medium", "low"]

CATEGORIES: Tuple[str, ...] = ("market", "regulation", "technology", "defi", "security", "adoption", "other")
SENTIMENTS: Tuple[str, ...] = ("bullish", "bearish", "neutral")
IMPORTANCE_LEVELS: Tuple[str, ...] = ("high", "medium", "low")

# Number of reason tags exposed to API consumers.
SURFACED_REASONS = 4


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with a trailing ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class RawArticle:
    """An item as delivered by a source adapter, before normalization and scoring."""

    title: str
    summary: str
    url: str
    source: str
    timestamp: Union[datetime, str, None] = None
    raw_category_hint: Optional[str] = None
    assets_hint: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Article:
    id: str
    title: str
    summary: str
    url: str
    source: str
    timestamp: datetime
    category: Category = "other"
    assets: Tuple[str, ...] = ()
    sentiment: Sentiment = "neutral"
    importance: Importance = "low"
    impact_score: int = 0
    volatility_score: int = 0
    bias_score: float = 0.0
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "sentiment": self.sentiment,
            "category": self.category,
            "assets": list(self.assets),
            "timestamp": format_timestamp(self.timestamp),
            "source": self.source,
            "importance": self.importance,
            "url": self.url,
            "impactScore": self.impact_score,
            "volatilityScore": self.volatility_score,
            "biasScore": self.bias_score,
            "reasons": list(self.reasons[:SURFACED_REASONS]),
        }
