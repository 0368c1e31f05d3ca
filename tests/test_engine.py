from newsignal.engine import NewsSignalEngine
from newsignal.utils.settings import EngineSettings


def test_empty_store(engine):
    assert engine.list_news("ALL") == []
    briefing = engine.get_briefing("ALL", 24)
    assert (briefing.posture, briefing.impact_score, briefing.volatility_score, briefing.ai_used) == (
        "Neutral",
        0,
        0,
        False,
    )
    assert engine.get_alerts("ALL", 180, 75).alerts == []


def test_exchange_halt_flows_through_every_read(engine, store, make_article):
    halt = make_article(
        "Exchange X halts withdrawals",
        minutes_ago=10,
        assets=("BTC",),
        sentiment="bearish",
        importance="high",
        impact=85,
        volatility=90,
        bias=-0.6,
        reasons=("bearish:halt", "impact:halt"),
    )
    store.upsert(make_article("ETF flows steady", minutes_ago=90, impact=55, bias=0.05))
    store.upsert(make_article("Ether fees fall", minutes_ago=30, assets=("ETH",), impact=78, bias=0.1))
    store.upsert(halt)

    assert halt in engine.list_news("BTC")
    assert halt not in engine.list_news("ETH")
    assert engine.get_alerts("BTC", 60, 80).alerts[0] == halt
    assert engine.get_alerts("ALL", 180, 75).alerts[0] == halt
    assert "risk-off" in engine.get_briefing("BTC", 24).posture


def test_engine_keeps_injected_empty_store(store, clock):
    engine = NewsSignalEngine(settings=EngineSettings(), store=store, clock=clock)
    try:
        assert engine.store is store
    finally:
        engine.close()


def test_from_settings_without_narrator():
    engine = NewsSignalEngine.from_settings(EngineSettings(briefing_ai_backend="none"))
    try:
        assert engine.briefings.narrator is None
        assert len(engine.store) == 0
    finally:
        engine.close()
