import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from newsignal.processors.dedup import article_id, dedup_key, should_replace
from newsignal.store import ArticleStore, QueryFilter


def test_dedup_key_ignores_case_and_spacing_but_not_day():
    ts = datetime(2026, 10, 18, 1, 0, tzinfo=timezone.utc)
    assert dedup_key("Exchange X  halts", "Wire", ts) == dedup_key("exchange x halts", "WIRE", ts + timedelta(hours=20))
    assert dedup_key("Exchange X halts", "Wire", ts) != dedup_key("Exchange X halts", "Wire", ts + timedelta(days=1))
    assert dedup_key("Exchange X halts", "Wire", ts) != dedup_key("Exchange X halts", "Other", ts)
    assert len(article_id("Exchange X halts", "Wire", ts)) == 16


def test_should_replace_requires_newer_and_different():
    t0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
    t1 = t0 + timedelta(hours=1)
    old = "Exchange X paused withdrawals citing maintenance."
    new = "Exchange X confirms insolvency after halting all withdrawals; users wait for news."

    assert should_replace(t0, old, t1, new)
    assert not should_replace(t0, old, t1, old + " ")
    assert not should_replace(t1, old, t0, new)
    assert not should_replace(t0, old, t0, new)


def test_insert_then_duplicate(store, make_article):
    first = make_article("Exchange X halts withdrawals")
    assert store.upsert(first).status == "inserted"

    again = store.upsert(first)
    assert again.status == "duplicate"
    assert again.replaced is False
    assert again.article is first
    assert len(store) == 1


def test_newer_material_update_replaces(store, make_article):
    original = make_article("Exchange X halts withdrawals", minutes_ago=120, summary="Withdrawals paused for maintenance.")
    store.upsert(original)
    update = make_article(
        "Exchange X halts withdrawals",
        minutes_ago=5,
        summary="Exchange X files for bankruptcy protection; customer funds frozen.",
        assets=("BTC", "ETH"),
        impact=95,
    )
    assert update.id == original.id

    result = store.upsert(update)
    assert result.status == "duplicate"
    assert result.replaced is True
    assert store.get(original.id) is update
    assert [a.id for a in store.query(QueryFilter(asset="ETH"))] == [update.id]


def test_stale_or_unchanged_update_is_ignored(store, make_article):
    current = make_article("Exchange X halts withdrawals", minutes_ago=5, summary="Withdrawals paused.")
    store.upsert(current)

    older = make_article("Exchange X halts withdrawals", minutes_ago=60, summary="Something else entirely happened.")
    same_text = make_article("Exchange X halts withdrawals", minutes_ago=1, summary="Withdrawals paused.")

    assert store.upsert(older).replaced is False
    assert store.upsert(same_text).replaced is False
    assert store.get(current.id) is current


def test_query_orders_newest_first_and_filters(store, make_article):
    btc = make_article("Bitcoin rallies", minutes_ago=30, assets=("BTC",), impact=80)
    eth = make_article("Ether gas spikes", minutes_ago=10, assets=("ETH",), category="technology", impact=30)
    both = make_article("Crypto market wobbles", minutes_ago=20, assets=("BTC", "ETH"), impact=60)
    for a in (btc, eth, both):
        store.upsert(a)

    assert store.query(QueryFilter()) == [eth, both, btc]
    assert store.query(QueryFilter(asset="BTC")) == [both, btc]
    assert store.query(QueryFilter(category="technology")) == [eth]
    assert store.query(QueryFilter(min_impact=60)) == [both, btc]
    assert store.query(QueryFilter(text="WOBBLES")) == [both]
    assert store.query(QueryFilter(since=both.timestamp)) == [eth, both]
    assert store.query(QueryFilter(limit=1)) == [eth]
    assert store.query(QueryFilter(limit=0)) == []


def test_timestamp_ties_are_broken_by_id(store, make_article):
    a = make_article("First headline", minutes_ago=10)
    b = make_article("Second headline", minutes_ago=10)
    store.upsert(a)
    store.upsert(b)
    expected = sorted([a, b], key=lambda x: x.id, reverse=True)
    assert store.query(QueryFilter()) == expected


def test_concurrent_upserts_of_same_id_insert_once(make_article):
    store = ArticleStore()
    base = make_article("Exchange X halts withdrawals")
    variants = [replace(base, summary=f"Report variant {i}") for i in range(16)]
    results = []
    barrier = threading.Barrier(len(variants))

    def worker(article):
        barrier.wait()
        results.append(store.upsert(article))

    threads = [threading.Thread(target=worker, args=(v,)) for v in variants]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.status == "inserted") == 1
    assert len(store) == 1
    assert len(store.query(QueryFilter(asset="BTC"))) == 1


def test_concurrent_upserts_of_distinct_ids(make_article):
    store = ArticleStore()
    articles = [make_article(f"Headline {i}", minutes_ago=i) for i in range(200)]

    def worker(chunk):
        for a in chunk:
            store.upsert(a)

    threads = [threading.Thread(target=worker, args=(articles[i::8],)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 200
    assert store.query(QueryFilter(limit=3)) == articles[:3]
