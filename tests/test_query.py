import pytest

from newsignal.engine import InvalidQuery, QueryEngine, resolve_asset, resolve_category


@pytest.fixture
def query(store, clock, make_article):
    for a in (
        make_article("Bitcoin ETF inflows climb", minutes_ago=30, assets=("BTC",)),
        make_article("Ethereum devs schedule upgrade", minutes_ago=90, assets=("ETH",), category="technology"),
        make_article("Regulators eye stablecoins", minutes_ago=60 * 30, assets=(), category="regulation"),
        make_article("Solana outage resolved", minutes_ago=60 * 3, assets=("SOL",), category="technology"),
    ):
        store.upsert(a)
    return QueryEngine(store, clock=clock)


def titles(articles):
    return [a.title for a in articles]


def test_resolvers():
    assert resolve_asset("all") is None
    assert resolve_asset(" btc ") == "BTC"
    assert resolve_category("ALL") is None
    assert resolve_category(None) is None
    assert resolve_category("DeFi") == "defi"
    for bad in ("", "B", "BTC-USD", "bit coin"):
        with pytest.raises(InvalidQuery):
            resolve_asset(bad)
    with pytest.raises(InvalidQuery):
        resolve_category("gossip")


def test_all_assets_newest_first(query):
    assert titles(query.list_news("ALL")) == [
        "Bitcoin ETF inflows climb",
        "Ethereum devs schedule upgrade",
        "Solana outage resolved",
        "Regulators eye stablecoins",
    ]


def test_asset_and_category_filters(query):
    assert titles(query.list_news("eth")) == ["Ethereum devs schedule upgrade"]
    assert titles(query.list_news("ALL", "technology")) == [
        "Ethereum devs schedule upgrade",
        "Solana outage resolved",
    ]
    assert query.list_news("DOGE") == []


def test_hours_window(query):
    assert titles(query.list_news("ALL", hours=2)) == [
        "Bitcoin ETF inflows climb",
        "Ethereum devs schedule upgrade",
    ]
    assert len(query.list_news("ALL", hours=48)) == 4


def test_text_search_is_case_insensitive(query):
    assert titles(query.list_news("ALL", q="OUTAGE")) == ["Solana outage resolved"]
    assert len(query.list_news("ALL", q="   ")) == 4


@pytest.mark.parametrize(
    "kwargs",
    [
        {"asset": "not a ticker"},
        {"asset": "ALL", "category": "gossip"},
        {"asset": "ALL", "hours": 0},
        {"asset": "ALL", "hours": -5},
        {"asset": "ALL", "limit": 0},
    ],
)
def test_invalid_filters_return_empty(query, kwargs):
    assert query.list_news(**kwargs) == []


def test_every_result_satisfies_its_filter(query, clock):
    for asset in ("ALL", "BTC", "ETH", "SOL"):
        for hours in (1, 2, 24, 48):
            since = clock().timestamp() - hours * 3600
            for a in query.list_news(asset, hours=hours):
                assert a.timestamp.timestamp() >= since
                assert asset == "ALL" or asset in a.assets


def test_limit_truncates(query):
    assert len(query.list_news("ALL", limit=2)) == 2
