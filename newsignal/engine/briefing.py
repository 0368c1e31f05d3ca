"""Windowed market briefing synthesis.

A briefing reduces the articles of an ``(asset, hours)`` window to a posture,
recency-weighted aggregate scores, the top high-impact stories and a narrative
with strategy hints. Results are cached per key for a short TTL and at most
one synthesis per key runs at a time: concurrent callers attach to the
in-flight future instead of starting new work.

Narratives come from an optional injected narrator (``aiUsed=True``). The
narrator runs on a small executor and is abandoned after ``ai_timeout``
seconds; any failure falls back to the deterministic template.
"""

from __future__ import annotations

import math
import threading
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import Article, Briefing
from ..processors.narrative import BriefingDraft, Narrative, Narrator, template_narrative
from ..utils.logging import get_logger
from .query import ALL_CATEGORIES, Clock, QueryEngine, utc_now

logger = get_logger("nse.engine.briefing")

DISCLAIMER = (
    "Informational only, not financial advice. Markets are volatile; "
    "size positions and manage risk accordingly."
)

# |mean bias| thresholds for posture labels
NEUTRAL_BAND = 0.15
MODERATE_BAND = 0.35
STRONG_BAND = 0.6

# floor for the linear recency decay
MIN_RECENCY_WEIGHT = 0.1

BriefingKey = Tuple[str, int]


def _no_news_phrase(label: str) -> str:
    if not label or label == "ALL":
        return "No news"
    return f"No {label} news"

class SynthesisUnavailable(RuntimeError):
    """The narrator failed, timed out or returned nothing usable."""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def recency_weight(timestamp: datetime, now: datetime, hours: float) -> float:
    age_hours = (now - timestamp).total_seconds() / 3600.0
    if age_hours <= 0:
        return 1.0
    return max(MIN_RECENCY_WEIGHT, 1.0 - age_hours / hours)


def posture_for(mean_bias: float) -> str:
    magnitude = abs(mean_bias)
    if magnitude < NEUTRAL_BAND:
        return "Neutral"
    direction = "risk-on" if mean_bias > 0 else "risk-off"
    if magnitude < MODERATE_BAND:
        return f"Cautious {direction}"
    if magnitude < STRONG_BAND:
        return direction.capitalize()
    return f"Strong {direction}"


def majority_sentiment(articles: Sequence[Article]) -> str:
    counts = Counter(a.sentiment for a in articles)
    top = max(counts.values(), default=0)
    leaders = [s for s in ("bullish", "bearish", "neutral") if counts.get(s, 0) == top]
    return leaders[0] if len(leaders) == 1 else "neutral"


class BriefingSynthesizer:
    def __init__(
        self,
        query: QueryEngine,
        *,
        narrator: Optional[Narrator] = None,
        ttl_seconds: float = 45.0,
        ai_timeout: float = 5.0,
        high_impact_count: int = 5,
        clock: Clock = utc_now,
        max_narrator_workers: int = 4,
    ) -> None:
        self.query = query
        self.narrator = narrator
        self.ttl = timedelta(seconds=ttl_seconds)
        self.ai_timeout = ai_timeout
        self.high_impact_count = high_impact_count
        self.clock = clock
        self._lock = threading.Lock()
        self._cache: Dict[BriefingKey, Briefing] = {}
        self._pending: Dict[BriefingKey, Future] = {}
        self._executor = ThreadPoolExecutor(max_workers=max_narrator_workers, thread_name_prefix="nse-narrator")

    # ---------------- Public API -----------------
    def get_briefing(self, asset: Optional[str], hours: int) -> Briefing:
        key: BriefingKey = ((asset or "").strip().upper(), int(hours))
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None and self.clock() < cached.generated_at + self.ttl:
                return cached
            pending = self._pending.get(key)
            owner = pending is None
            if owner:
                pending = self._pending[key] = Future()

        if not owner:
            logger.debug("Joining in-flight briefing for %s", key)
            return pending.result()

        try:
            briefing = self._synthesize(asset, key[0], key[1])
        except BaseException as exc:
            with self._lock:
                self._pending.pop(key, None)
            pending.set_exception(exc)
            raise

        with self._lock:
            self._evict_expired()
            self._cache[key] = briefing
            self._pending.pop(key, None)
        pending.set_result(briefing)
        return briefing

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ---------------- Synthesis -----------------
    def _evict_expired(self) -> None:
        now = self.clock()
        stale = [k for k, b in self._cache.items() if now >= b.generated_at + self.ttl]
        for k in stale:
            del self._cache[k]

    def _synthesize(self, asset: Optional[str], label: str, hours: int) -> Briefing:
        now = self.clock()
        articles = self.query.list_news(asset, ALL_CATEGORIES, hours) if hours > 0 else []
        if not articles:
            return self._no_data(label, hours, now)

        weights = [recency_weight(a.timestamp, now, hours) for a in articles]
        total_w = sum(weights)
        impact = round_half_up(sum(w * a.impact_score for w, a in zip(weights, articles)) / total_w)
        volatility = round_half_up(sum(w * a.volatility_score for w, a in zip(weights, articles)) / total_w)
        mean_bias = sum(w * a.bias_score for w, a in zip(weights, articles)) / total_w

        counts = Counter(a.sentiment for a in articles)
        high_impact = sorted(articles, key=lambda a: (a.impact_score, a.timestamp), reverse=True)
        draft = BriefingDraft(
            asset=label,
            hours=hours,
            posture=posture_for(mean_bias),
            sentiment=majority_sentiment(articles),
            impact_score=impact,
            volatility_score=volatility,
            mean_bias=round(mean_bias, 3),
            bullish=counts.get("bullish", 0),
            bearish=counts.get("bearish", 0),
            neutral=counts.get("neutral", 0),
            high_impact=high_impact[: self.high_impact_count],
        )
        narrative, ai_used = self._narrate(articles, draft)
        logger.info(
            "Briefing %s/%sh: articles=%d posture=%s impact=%d volatility=%d ai=%s",
            label, hours, len(articles), draft.posture, impact, volatility, ai_used,
        )
        return Briefing(
            generated_at=now,
            asset=label,
            hours=hours,
            posture=draft.posture,
            sentiment=draft.sentiment,
            impact_score=impact,
            volatility_score=volatility,
            ai_used=ai_used,
            briefing=narrative.briefing,
            strategy_hints=list(narrative.strategy_hints),
            high_impact=list(draft.high_impact),
            disclaimer=DISCLAIMER,
        )

    def _call_narrator(self, articles: List[Article], draft: BriefingDraft) -> Narrative:
        try:
            future = self._executor.submit(self.narrator, articles, draft)
        except RuntimeError as exc:
            raise SynthesisUnavailable("narrator executor is shut down") from exc
        try:
            narrative = future.result(timeout=self.ai_timeout)
        except FutureTimeout as exc:
            future.cancel()
            raise SynthesisUnavailable(f"narrator timed out after {self.ai_timeout:.1f}s") from exc
        except Exception as exc:  # noqa: BLE001 - any narrator fault means fallback
            raise SynthesisUnavailable(str(exc) or type(exc).__name__) from exc
        if narrative is None or not (narrative.briefing or "").strip():
            raise SynthesisUnavailable("narrator returned an empty briefing")
        return narrative

    def _narrate(self, articles: List[Article], draft: BriefingDraft) -> Tuple[Narrative, bool]:
        if self.narrator is None:
            return template_narrative(draft), False
        try:
            return self._call_narrator(articles, draft), True
        except SynthesisUnavailable as exc:
            logger.warning("Briefing narrator unavailable for %s/%sh: %s; using template", draft.asset, draft.hours, exc)
            return template_narrative(draft), False

    @staticmethod
    def _no_data(label: str, hours: int, now: datetime) -> Briefing:
        return Briefing(
            generated_at=now,
            asset=label,
            hours=hours,
            posture="Neutral",
            sentiment="neutral",
            impact_score=0,
            volatility_score=0,
            ai_used=False,
            briefing=(
                f"{_no_news_phrase(label)} in the last {hours}h. "
                "The briefing will update as new articles are ingested."
            ),
            strategy_hints=["No fresh catalysts: keep existing risk limits and avoid acting on stale information."],
            high_impact=[],
            disclaimer=DISCLAIMER,
        )
