from datetime import datetime, timezone

import pytest

from newsignal.models import RawArticle
from newsignal.processors.dedup import article_id
from newsignal.processors.scoring import DEGRADED_REASON, Scorer

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def scorer():
    return Scorer()


def raw(title, summary="", **kwargs):
    kwargs.setdefault("timestamp", NOW)
    return RawArticle(title=title, summary=summary, url="https://x.example/a", source="Wire", **kwargs)


def test_exchange_halt_is_bearish_high_impact(scorer):
    article = scorer.score(raw("Exchange X halts withdrawals", assets_hint=["BTC"]), now=NOW)

    assert article.sentiment == "bearish"
    assert article.importance == "high"
    assert article.impact_score == 90
    assert article.volatility_score == 77
    assert article.bias_score == pytest.approx(-0.667)
    assert article.category == "market"
    assert article.assets == ("BTC",)
    assert "bearish:halt" in article.reasons


def test_etf_approval_is_bullish(scorer):
    article = scorer.score(raw("SEC approves spot Bitcoin ETF as inflows surge"), now=NOW)

    assert article.sentiment == "bullish"
    assert article.bias_score > 0.5
    assert article.importance == "high"
    assert "BTC" in article.assets


def test_rumor_is_volatile_but_not_impactful(scorer):
    article = scorer.score(raw("Rumor: whale reportedly moving coins in unconfirmed speculation"), now=NOW)

    assert article.impact_score == 20
    assert article.importance == "low"
    assert article.volatility_score == 100
    assert article.sentiment == "neutral"
    assert article.category == "other"


def test_bias_is_independent_of_sentiment_label(scorer):
    mixed = scorer.score(raw("gain amid concern uncertain caution pressure weak fear decline headwind"), now=NOW)
    assert mixed.sentiment == "bullish"
    assert mixed.bias_score < 0

    hedged = scorer.score(raw("prices could drop"), now=NOW)
    assert hedged.sentiment == "neutral"
    assert hedged.bias_score != 0
    assert -1.0 <= hedged.bias_score < 0


def test_scores_stay_in_range(scorer):
    article = scorer.score(
        raw(
            "Massive hack: exchange halts withdrawals, bankruptcy fears, crash and liquidation",
            "Historic exploit; SEC lawsuit; depeg; ban; fraud; stolen funds; plunge.",
            assets_hint=["ETH"],
        ),
        now=NOW,
    )
    assert 0 <= article.impact_score <= 100
    assert 0 <= article.volatility_score <= 100
    assert -1.0 <= article.bias_score <= 1.0
    assert article.bias_score == -1.0


def test_valid_category_hint_wins(scorer):
    article = scorer.score(raw("Uniswap volume climbs", raw_category_hint="defi"), now=NOW)
    assert article.category == "defi"

    unknown = scorer.score(raw("Hackers drain bridge in exploit", raw_category_hint="gossip"), now=NOW)
    assert unknown.category == "security"


def test_assets_from_cashtags_and_aliases(scorer):
    article = scorer.score(raw("$SOL jumps while Ethereum lags"), now=NOW)
    assert article.assets == ("ETH", "SOL")


def test_id_is_content_derived(scorer):
    item = raw("Exchange X halts withdrawals")
    article = scorer.score(item, now=NOW)
    assert article.id == article_id("Exchange X halts withdrawals", "Wire", NOW)
    assert scorer.score(raw("Exchange X halts withdrawals"), now=NOW).id == article.id


def test_missing_timestamp_uses_now(scorer):
    article = scorer.score(raw("Bitcoin steady", timestamp=None), now=NOW)
    assert article.timestamp == NOW


def test_internal_fault_yields_degraded_record(monkeypatch):
    scorer = Scorer()

    def boom(*args, **kwargs):
        raise RuntimeError("lexicon exploded")

    monkeypatch.setattr(scorer, "_score", boom)
    article = scorer.score(raw("Exchange X halts withdrawals", raw_category_hint="market", assets_hint=["btc"]), now=NOW)

    assert article.sentiment == "neutral"
    assert article.importance == "low"
    assert article.reasons == (DEGRADED_REASON,)
    assert article.category == "market"
    assert article.assets == ("BTC",)
    assert article.bias_score == 0.0
