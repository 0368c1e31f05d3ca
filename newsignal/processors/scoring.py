"""Keyword/heuristic classifier and scorer for raw articles.

The scorer turns a normalized :class:`RawArticle` into an immutable
:class:`Article` with a category, the assets it concerns, a discrete
sentiment, and three independent numeric estimates:

- ``impact_score``: how much the story matters to the market (0-100)
- ``volatility_score``: how much price swing it implies (0-100)
- ``bias_score``: signed directional pressure in [-1, 1]

Sentiment is a thresholded vote over strong cue words while the bias also
weighs soft cues and intensity, so the two can disagree on edge cases.
Scoring never raises: an internal fault produces a neutral, low-importance
record tagged ``classification-degraded``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from ..models import CATEGORIES, Article, RawArticle
from ..utils.logging import get_logger
from .dedup import article_id
from .normalize import parse_timestamp

logger = get_logger("nse.processors.scoring")

DEGRADED_REASON = "classification-degraded"
MAX_REASONS = 8

SENTIMENT_THRESHOLD = 2.0
TITLE_WEIGHT = 2.0

IMPACT_BASE = 20
VOLATILITY_BASE = 15
ASSET_BONUS = 10
MAJOR_ASSET_BONUS = 5
MAJOR_ASSETS = {"BTC", "ETH"}
CATEGORY_IMPACT_BONUS = {"regulation": 5, "security": 5}

HIGH_IMPORTANCE = 70
MEDIUM_IMPORTANCE = 40

_CASHTAG_RE = re.compile(r"\$([A-Za-z]{2,10})\b")


@dataclass(slots=True)
class Lexicon:
    """Cue words and weights driving the heuristic model."""

    bullish: Dict[str, float] = field(default_factory=dict)
    bearish: Dict[str, float] = field(default_factory=dict)
    soft_positive: Sequence[str] = ()
    soft_negative: Sequence[str] = ()
    intensity: Sequence[str] = ()
    impact: Dict[str, int] = field(default_factory=dict)
    volatility: Dict[str, int] = field(default_factory=dict)
    categories: Dict[str, Sequence[str]] = field(default_factory=dict)
    asset_aliases: Dict[str, Sequence[str]] = field(default_factory=dict)


DEFAULT_LEXICON = Lexicon(
    bullish={
        "approval": 3, "approve": 3, "surge": 3, "surging": 3, "rally": 3, "soar": 3,
        "record high": 3, "all-time high": 3, "bullish": 3, "inflow": 2, "breakout": 2,
        "partnership": 2, "adoption": 2, "adopt": 2, "gain": 2, "jump": 2, "rebound": 2,
        "recover": 2, "accumulate": 2, "launch": 1, "upgrade": 1, "buy": 1, "institutional": 1,
    },
    bearish={
        "hack": 3, "exploit": 3, "halt": 3, "ban": 3, "banned": 3, "crackdown": 3, "plunge": 3,
        "crash": 3, "delist": 3, "bankruptcy": 3, "bankrupt": 3, "insolvency": 3, "insolvent": 3,
        "fraud": 3, "breach": 3, "stolen": 3, "bearish": 3, "depeg": 3, "lawsuit": 2, "sue": 2,
        "liquidation": 2, "outflow": 2, "sell-off": 2, "selloff": 2, "slump": 2, "freeze": 2,
        "suspend": 2, "reject": 2, "rejection": 2, "investigation": 2, "probe": 2, "charged": 2,
        "drop": 1, "dropped": 1, "fall": 1, "fell": 1, "warn": 1,
    },
    soft_positive=(
        "optimistic", "steady", "stable", "resilient", "support", "growth", "improve",
        "positive", "strong", "higher", "rise", "rose", "momentum",
    ),
    soft_negative=(
        "concern", "uncertain", "uncertainty", "caution", "cautious", "pressure", "weak",
        "lower", "fear", "decline", "volatile", "headwind",
    ),
    intensity=(
        "massive", "record", "sharp", "sharply", "major", "historic", "unprecedented",
        "biggest", "largest",
    ),
    impact={
        "halt": 35, "hack": 30, "bankruptcy": 30, "bankrupt": 30, "insolvency": 30,
        "exploit": 25, "depeg": 25, "withdrawal": 20, "sec": 20, "etf": 20, "federal reserve": 20,
        "ban": 20, "approval": 20, "approve": 20, "delist": 20, "crash": 20, "fed": 15,
        "interest rate": 15, "lawsuit": 15, "liquidation": 15, "record high": 15, "all-time high": 15,
        "regulator": 10, "regulation": 10, "blackrock": 10, "treasury": 10, "billion": 10,
        "institutional": 10, "fork": 10, "partnership": 8, "upgrade": 8, "million": 5, "stablecoin": 5,
    },
    volatility={
        "halt": 30, "depeg": 30, "rumor": 25, "rumour": 25, "liquidation": 25, "crash": 25,
        "unconfirmed": 20, "plunge": 20, "surge": 20, "surging": 20, "soar": 20, "squeeze": 20,
        "hack": 20, "exploit": 20, "reportedly": 15, "speculation": 15, "withdrawal": 15,
        "leverage": 15, "whale": 15, "volatile": 15, "volatility": 15, "delist": 15, "etf": 10,
    },
    categories={
        "market": (
            "price", "rally", "etf", "trading", "market", "inflow", "outflow", "liquidation",
            "exchange", "futures", "volume", "selloff", "sell-off",
        ),
        "regulation": (
            "sec", "regulator", "regulation", "regulatory", "law", "legislation", "bill", "ban",
            "lawsuit", "cftc", "compliance", "sanction", "court", "congress", "senate",
            "lawmaker", "license", "tax",
        ),
        "technology": (
            "upgrade", "fork", "layer 2", "layer-2", "mainnet", "testnet", "protocol", "scaling",
            "developer", "node", "smart contract", "zk",
        ),
        "defi": (
            "defi", "dex", "liquidity pool", "yield", "lending", "uniswap", "aave", "staking",
            "tvl", "amm",
        ),
        "security": (
            "hack", "exploit", "breach", "vulnerability", "stolen", "phishing", "attack", "scam",
            "drain", "rug pull", "compromise",
        ),
        "adoption": (
            "adoption", "adopt", "partnership", "payment", "merchant", "accept", "institutional",
            "integration", "customer", "bank",
        ),
    },
    asset_aliases={
        "BTC": ("bitcoin", "btc"),
        "ETH": ("ethereum", "ether", "eth"),
        "XRP": ("xrp", "ripple"),
        "SOL": ("solana",),
        "ADA": ("cardano", "ada"),
        "DOGE": ("dogecoin", "doge"),
        "BNB": ("bnb", "binance coin"),
        "USDT": ("tether", "usdt"),
        "USDC": ("usdc", "usd coin"),
        "LTC": ("litecoin", "ltc"),
        "DOT": ("polkadot",),
        "AVAX": ("avalanche", "avax"),
        "LINK": ("chainlink",),
        "TRX": ("tron", "trx"),
        "TON": ("toncoin",),
    },
)


def _term_pattern(term: str) -> Pattern[str]:
    # allow simple inflections: halts, halted, approves, approved, ...
    return re.compile(r"\b" + re.escape(term.lower()) + r"(?:s|es|ed|d|ing)?\b")


def _compile(terms: Iterable[str]) -> List[Tuple[str, Pattern[str]]]:
    return [(t, _term_pattern(t)) for t in terms]


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class Scorer:
    """Deterministic keyword model. Thread-safe: holds only compiled patterns."""

    def __init__(self, lexicon: Lexicon | None = None) -> None:
        self.lexicon = lexicon or DEFAULT_LEXICON
        lx = self.lexicon
        self._bullish = _compile(lx.bullish)
        self._bearish = _compile(lx.bearish)
        self._soft_pos = _compile(lx.soft_positive)
        self._soft_neg = _compile(lx.soft_negative)
        self._intensity = _compile(lx.intensity)
        self._impact = _compile(lx.impact)
        self._volatility = _compile(lx.volatility)
        self._categories = {cat: _compile(terms) for cat, terms in lx.categories.items()}
        self._aliases = {
            ticker: [p for _, p in _compile(names)] for ticker, names in lx.asset_aliases.items()
        }

    # ---------------- Public API -----------------
    def score(self, raw: RawArticle, *, now: Optional[datetime] = None) -> Article:
        now = now or datetime.now(timezone.utc)
        timestamp = parse_timestamp(raw.timestamp) or now
        identity = article_id(raw.title, raw.source, timestamp)
        try:
            return self._score(raw, identity, timestamp)
        except Exception as exc:  # noqa: BLE001 - scoring must never fail ingestion
            logger.warning("Scoring failed for '%s': %s; storing degraded record", raw.title, exc)
            return self.degraded(raw, identity, timestamp)

    # ---------------- Matching helpers -----------------
    @staticmethod
    def _matches(compiled: List[Tuple[str, Pattern[str]]], text: str) -> List[str]:
        return [term for term, pattern in compiled if pattern.search(text)]

    def _weighted_hits(
        self, compiled: List[Tuple[str, Pattern[str]]], weights: Dict[str, float], title: str, body: str
    ) -> Tuple[float, List[str]]:
        total = 0.0
        terms: List[str] = []
        for term, pattern in compiled:
            in_title = bool(pattern.search(title))
            in_body = bool(pattern.search(body))
            if not (in_title or in_body):
                continue
            total += weights[term] * (TITLE_WEIGHT if in_title else 1.0)
            terms.append(term)
        return total, terms

    def detect_assets(self, raw: RawArticle, text: str) -> Tuple[str, ...]:
        found = {a.strip().upper() for a in raw.assets_hint if a and a.strip()}
        for m in _CASHTAG_RE.finditer(f"{raw.title} {raw.summary}"):
            found.add(m.group(1).upper())
        for ticker, patterns in self._aliases.items():
            if any(p.search(text) for p in patterns):
                found.add(ticker)
        return tuple(sorted(found))

    def classify_category(self, raw: RawArticle, text: str) -> str:
        hint = (raw.raw_category_hint or "").strip().lower()
        if hint in CATEGORIES:
            return hint
        best, best_hits = "other", 0
        for cat in CATEGORIES:
            hits = len(self._matches(self._categories.get(cat, []), text))
            if hits > best_hits:
                best, best_hits = cat, hits
        return best

    # ---------------- Scoring -----------------
    def _score(self, raw: RawArticle, identity: str, timestamp: datetime) -> Article:
        title = (raw.title or "").lower()
        body = (raw.summary or "").lower()
        text = f"{title}\n{body}"

        category = self.classify_category(raw, text)
        assets = self.detect_assets(raw, text)

        bull, bull_terms = self._weighted_hits(self._bullish, self.lexicon.bullish, title, body)
        bear, bear_terms = self._weighted_hits(self._bearish, self.lexicon.bearish, title, body)
        soft_pos = len(self._matches(self._soft_pos, text))
        soft_neg = len(self._matches(self._soft_neg, text))
        intensity = len(self._matches(self._intensity, text))

        net = bull - bear
        if net >= SENTIMENT_THRESHOLD:
            sentiment = "bullish"
        elif net <= -SENTIMENT_THRESHOLD:
            sentiment = "bearish"
        else:
            sentiment = "neutral"

        soft_net = 0.5 * (soft_pos - soft_neg)
        denom = bull + bear + 0.5 * (soft_pos + soft_neg) + 3.0
        bias = (net + soft_net) / denom
        bias *= min(1.5, 1.0 + 0.15 * intensity)
        bias = round(_clamp(bias, -1.0, 1.0), 3)

        impact_terms = self._matches(self._impact, text)
        impact = IMPACT_BASE + sum(self.lexicon.impact[t] for t in impact_terms)
        if assets:
            impact += ASSET_BONUS
            if MAJOR_ASSETS.intersection(assets):
                impact += MAJOR_ASSET_BONUS
        impact += CATEGORY_IMPACT_BONUS.get(category, 0)
        impact = int(_clamp(impact, 0, 100))

        vol_terms = self._matches(self._volatility, text)
        volatility = VOLATILITY_BASE + sum(self.lexicon.volatility[t] for t in vol_terms) + 25 * abs(bias)
        volatility = int(round(_clamp(volatility, 0, 100)))

        if impact >= HIGH_IMPORTANCE:
            importance = "high"
        elif impact >= MEDIUM_IMPORTANCE:
            importance = "medium"
        else:
            importance = "low"

        reasons: List[str] = []
        lead_terms = bear_terms if sentiment == "bearish" else bull_terms if sentiment == "bullish" else []
        reasons.extend(f"{sentiment}:{t}" for t in lead_terms[:2])
        reasons.extend(f"impact:{t}" for t in sorted(impact_terms, key=lambda t: -self.lexicon.impact[t])[:2])
        reasons.extend(f"volatility:{t}" for t in sorted(vol_terms, key=lambda t: -self.lexicon.volatility[t])[:1])
        reasons.extend(f"asset:{a}" for a in assets[:2])
        reasons.append(f"category:{category}")

        return Article(
            id=identity,
            title=raw.title,
            summary=raw.summary,
            url=raw.url,
            source=raw.source,
            timestamp=timestamp,
            category=category,
            assets=assets,
            sentiment=sentiment,
            importance=importance,
            impact_score=impact,
            volatility_score=volatility,
            bias_score=bias,
            reasons=tuple(reasons[:MAX_REASONS]),
        )

    @staticmethod
    def degraded(raw: RawArticle, identity: str, timestamp: datetime) -> Article:
        """Neutral low-impact record kept when classification fails."""
        hint = (raw.raw_category_hint or "").strip().lower()
        assets = tuple(sorted({str(a).strip().upper() for a in (raw.assets_hint or []) if str(a).strip()}))
        return Article(
            id=identity,
            title=raw.title or "",
            summary=raw.summary or "",
            url=raw.url or "",
            source=raw.source or "",
            timestamp=timestamp,
            category=hint if hint in CATEGORIES else "other",
            assets=assets,
            sentiment="neutral",
            importance="low",
            impact_score=10,
            volatility_score=10,
            bias_score=0.0,
            reasons=(DEGRADED_REASON,),
        )
