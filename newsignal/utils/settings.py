from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(slots=True)
class EngineSettings:
    briefing_ttl_seconds: float = 45.0
    briefing_ai_timeout: float = 5.0
    briefing_ai_backend: str = "none"
    briefing_high_impact_count: int = 5
    ingest_interval_seconds: int = 300
    ingest_fetch_timeout: int = 20
    for_you_asset: str = "BTC"
    max_limit: int = 500

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Build settings from environment variables, ignoring malformed values."""
        defaults = cls()
        return cls(
            briefing_ttl_seconds=_env_float("BRIEFING_TTL_SECONDS", defaults.briefing_ttl_seconds),
            briefing_ai_timeout=_env_float("BRIEFING_AI_TIMEOUT", defaults.briefing_ai_timeout),
            briefing_ai_backend=(os.getenv("BRIEFING_AI_BACKEND") or defaults.briefing_ai_backend).strip().lower(),
            briefing_high_impact_count=_env_int("BRIEFING_HIGH_IMPACT_COUNT", defaults.briefing_high_impact_count),
            ingest_interval_seconds=_env_int("INGEST_INTERVAL_SECONDS", defaults.ingest_interval_seconds),
            ingest_fetch_timeout=_env_int("INGEST_FETCH_TIMEOUT", defaults.ingest_fetch_timeout),
            for_you_asset=(os.getenv("NEWS_FOR_YOU_ASSET") or defaults.for_you_asset).strip().upper(),
            max_limit=_env_int("NEWS_MAX_LIMIT", defaults.max_limit),
        )
