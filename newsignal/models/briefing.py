from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from .article import Article, Sentiment, format_timestamp


@dataclass(frozen=True, slots=True)
class Briefing:
    generated_at: datetime
    asset: str
    hours: int
    posture: str
    sentiment: Sentiment
    impact_score: int
    volatility_score: int
    ai_used: bool
    briefing: str
    strategy_hints: List[str] = field(default_factory=list)
    high_impact: List[Article] = field(default_factory=list)
    disclaimer: str = ""

    def to_dict(self) -> dict:
        return {
            "generatedAt": format_timestamp(self.generated_at),
            "asset": self.asset,
            "hours": self.hours,
            "posture": self.posture,
            "sentiment": self.sentiment,
            "impactScore": self.impact_score,
            "volatilityScore": self.volatility_score,
            "aiUsed": self.ai_used,
            "briefing": self.briefing,
            "strategyHints": list(self.strategy_hints),
            "highImpact": [a.to_dict() for a in self.high_impact],
            "disclaimer": self.disclaimer,
        }


@dataclass(frozen=True, slots=True)
class AlertWindow:
    generated_at: datetime
    minutes: int
    min_impact: int
    alerts: List[Article] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generatedAt": format_timestamp(self.generated_at),
            "minutes": self.minutes,
            "minImpact": self.min_impact,
            "alerts": [a.to_dict() for a in self.alerts],
        }
