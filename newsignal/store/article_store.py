from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterator, List, Literal, Optional, Set

from ..models import Article
from ..processors.dedup import should_replace
from ..utils.logging import get_logger

logger = get_logger("nse.store")

UpsertStatus = Literal["inserted", "duplicate"]


@dataclass(frozen=True, slots=True)
class UpsertResult:
    status: UpsertStatus
    article: Article
    # True when a duplicate key carried a newer, materially different report
    replaced: bool = False


@dataclass(slots=True)
class QueryFilter:
    """Read filter; ``None`` fields do not constrain the result."""

    asset: Optional[str] = None
    category: Optional[str] = None
    since: Optional[datetime] = None
    min_impact: Optional[int] = None
    text: Optional[str] = None
    limit: Optional[int] = None

    def matches(self, article: Article) -> bool:
        if self.asset is not None and self.asset not in article.assets:
            return False
        if self.category is not None and article.category != self.category:
            return False
        if self.since is not None and article.timestamp < self.since:
            return False
        if self.min_impact is not None and article.impact_score < self.min_impact:
            return False
        if self.text:
            needle = self.text.lower()
            if needle not in article.title.lower() and needle not in article.summary.lower():
                return False
        return True


class _KeyedLocks:
    """Reference-counted lock per key; entries are dropped once unused."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._refs: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._refs[key] = self._refs.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._refs[key] -= 1
                if self._refs[key] == 0:
                    del self._refs[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class ArticleStore:
    """In-memory store of scored articles keyed by dedup id.

    Upserts of the same id serialize on a per-key lock; upserts of different
    ids only share the short index lock. Reads copy candidates under the
    index lock and filter/sort outside it.
    """

    def __init__(self) -> None:
        self._articles: Dict[str, Article] = {}
        self._by_asset: Dict[str, Set[str]] = defaultdict(set)
        self._by_category: Dict[str, Set[str]] = defaultdict(set)
        self._index_lock = threading.Lock()
        self._key_locks = _KeyedLocks()

    # ---------------- Writes -----------------
    def upsert(self, article: Article) -> UpsertResult:
        with self._key_locks.hold(article.id):
            existing = self.get(article.id)
            if existing is None:
                self._put(article, previous=None)
                logger.debug("Inserted %s: %s", article.id, article.title)
                return UpsertResult(status="inserted", article=article)

            if should_replace(existing.timestamp, existing.summary, article.timestamp, article.summary):
                self._put(article, previous=existing)
                logger.info("Replaced %s with newer report: %s", article.id, article.title)
                return UpsertResult(status="duplicate", article=article, replaced=True)

            return UpsertResult(status="duplicate", article=existing)

    def _put(self, article: Article, *, previous: Optional[Article]) -> None:
        with self._index_lock:
            if previous is not None:
                for asset in previous.assets:
                    ids = self._by_asset.get(asset)
                    if ids is not None:
                        ids.discard(previous.id)
                        if not ids:
                            del self._by_asset[asset]
                cat_ids = self._by_category.get(previous.category)
                if cat_ids is not None:
                    cat_ids.discard(previous.id)
            self._articles[article.id] = article
            for asset in article.assets:
                self._by_asset[asset].add(article.id)
            self._by_category[article.category].add(article.id)

    # ---------------- Reads -----------------
    def get(self, article_id: str) -> Optional[Article]:
        with self._index_lock:
            return self._articles.get(article_id)

    def contains(self, article_id: str) -> bool:
        with self._index_lock:
            return article_id in self._articles

    def __len__(self) -> int:
        with self._index_lock:
            return len(self._articles)

    def snapshot(self) -> List[Article]:
        with self._index_lock:
            return list(self._articles.values())

    def _candidates(self, flt: QueryFilter) -> List[Article]:
        with self._index_lock:
            ids: Optional[Set[str]] = None
            if flt.asset is not None:
                ids = set(self._by_asset.get(flt.asset, ()))
            if flt.category is not None:
                cat_ids = self._by_category.get(flt.category, set())
                ids = set(cat_ids) if ids is None else ids & cat_ids
            if ids is None:
                return list(self._articles.values())
            return [self._articles[i] for i in ids if i in self._articles]

    def query(self, flt: QueryFilter) -> List[Article]:
        """Return matching articles, newest first (id breaks timestamp ties)."""
        if flt.limit is not None and flt.limit <= 0:
            return []
        hits = [a for a in self._candidates(flt) if flt.matches(a)]
        hits.sort(key=lambda a: (a.timestamp, a.id), reverse=True)
        if flt.limit is not None:
            hits = hits[: flt.limit]
        return hits
