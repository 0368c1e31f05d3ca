from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Mapping, Optional

from ..fetchers import DEFAULT_ADAPTERS, SourceAdapter
from ..models import RawArticle, Source
from ..processors.dedup import article_id
from ..processors.normalize import normalize_raw_article
from ..processors.scoring import DEGRADED_REASON, Scorer
from ..store import ArticleStore
from ..utils.clock import Clock, utc_now
from ..utils.logging import get_logger
from .report import CycleReport, SourceResult

logger = get_logger("nse.pipeline.ingestion")


class IngestionPipeline:
    """Fetch → normalize → dedup check → score → upsert, isolated per source.

    A failing source is recorded in its :class:`SourceResult` and never
    affects the others; the next scheduled run is the retry.
    """

    def __init__(
        self,
        store: ArticleStore,
        scorer: Scorer | None = None,
        *,
        adapters: Optional[Mapping[str, SourceAdapter]] = None,
        fetch_timeout: int = 20,
        clock: Clock = utc_now,
        max_workers: int = 16,
    ) -> None:
        self.store = store
        self.scorer = scorer or Scorer()
        self.adapters: Dict[str, SourceAdapter] = dict(adapters if adapters is not None else DEFAULT_ADAPTERS)
        self.fetch_timeout = fetch_timeout
        self.clock = clock
        self.max_workers = max_workers
        self._reports_lock = threading.Lock()
        self._last_reports: Dict[str, SourceResult] = {}

    @property
    def last_reports(self) -> List[SourceResult]:
        with self._reports_lock:
            return list(self._last_reports.values())

    def _record(self, result: SourceResult) -> None:
        result.finished_at = self.clock()
        with self._reports_lock:
            self._last_reports[result.source] = result

    # ---------------- Per source -----------------
    def run_source(self, source: Source) -> SourceResult:
        result = SourceResult(source=source.name)
        fetched_at = self.clock()
        adapter = self.adapters.get(source.type)
        try:
            if adapter is None:
                raise ValueError(f"No adapter registered for source type '{source.type}'")
            raw_items = list(adapter(source, timeout=self.fetch_timeout) or [])
        except Exception as exc:  # noqa: BLE001 - a source failure must not stop the cycle
            logger.exception("Failed to fetch from %s: %s", source.name, exc)
            result.failed = True
            result.error = f"{type(exc).__name__}: {exc}"
            self._record(result)
            return result

        result.fetched = len(raw_items)
        try:
            for raw in raw_items:
                self._ingest_item(source, raw, fetched_at, result)
        except Exception as exc:  # noqa: BLE001 - store or scorer fault ends this source only
            logger.exception("Ingestion aborted for %s: %s", source.name, exc)
            result.failed = True
            result.error = f"{type(exc).__name__}: {exc}"
            self._record(result)
            return result

        logger.info(
            "Source %s: fetched=%d inserted=%d replaced=%d duplicates=%d filtered=%d invalid=%d degraded=%d",
            source.name,
            result.fetched,
            result.inserted,
            result.replaced,
            result.duplicates,
            result.filtered,
            result.invalid,
            result.degraded,
        )
        self._record(result)
        return result

    @staticmethod
    def _matches_keywords(source: Source, raw: RawArticle) -> bool:
        if not source.keywords:
            return True
        haystack = f"{raw.title} {raw.summary}".lower()
        return any(k.lower() in haystack for k in source.keywords)

    def _ingest_item(self, source: Source, raw: RawArticle, fetched_at, result: SourceResult) -> None:
        try:
            item = normalize_raw_article(raw, fetched_at=fetched_at)
        except Exception as exc:  # noqa: BLE001 - malformed adapter item
            logger.warning("Skipping malformed item from %s: %s", source.name, exc)
            result.invalid += 1
            return
        if not item.title:
            result.invalid += 1
            return
        if not item.source:
            item.source = source.name
        if not self._matches_keywords(source, item):
            result.filtered += 1
            return

        existing = self.store.get(article_id(item.title, item.source, item.timestamp))
        if existing is not None and not item.timestamp > existing.timestamp:
            result.duplicates += 1
            return

        try:
            article = self.scorer.score(item, now=fetched_at)
        except Exception as exc:  # noqa: BLE001 - pluggable scorer
            logger.warning("Scorer raised for '%s' from %s: %s; storing degraded record", item.title, source.name, exc)
            timestamp = item.timestamp or fetched_at
            article = Scorer.degraded(item, article_id(item.title, item.source, timestamp), timestamp)
        if DEGRADED_REASON in article.reasons:
            result.degraded += 1

        outcome = self.store.upsert(article)
        if outcome.status == "inserted":
            result.inserted += 1
        elif outcome.replaced:
            result.replaced += 1
        else:
            result.duplicates += 1

    # ---------------- Whole cycle -----------------
    def run_cycle(self, sources: Iterable[Source]) -> CycleReport:
        """Run every source once, concurrently."""
        src_list = list(sources)
        report = CycleReport(started_at=self.clock())
        if not src_list:
            report.finished_at = self.clock()
            return report

        max_workers = min(self.max_workers, len(src_list))
        logger.debug("Starting ingestion cycle for %d sources (workers=%d)", len(src_list), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {executor.submit(self.run_source, s): s for s in src_list}
            for fut in as_completed(future_map):
                source = future_map[fut]
                try:
                    report.sources.append(fut.result())
                except Exception as exc:  # noqa: BLE001
                    logger.exception("Source %s crashed: %s", source.name, exc)
                    failed = SourceResult(source=source.name, failed=True, error=f"{type(exc).__name__}: {exc}")
                    self._record(failed)
                    report.sources.append(failed)

        report.sources.sort(key=lambda r: r.source)
        report.finished_at = self.clock()
        logger.info(
            "Ingestion cycle finished: sources_ok=%d sources_failed=%d inserted=%d duplicates=%d store_size=%d",
            report.succeeded,
            report.failed,
            report.inserted,
            report.duplicates,
            len(self.store),
        )
        return report


class IngestionScheduler:
    """One periodic timer thread per source, concurrent with read traffic."""

    def __init__(self, pipeline: IngestionPipeline, sources: Iterable[Source], *, default_interval: int = 300) -> None:
        self.pipeline = pipeline
        self.sources = list(sources)
        self.default_interval = default_interval
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def interval_for(self, source: Source) -> int:
        return source.interval_seconds or self.default_interval

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._threads = []
        for source in self.sources:
            thread = threading.Thread(
                target=self._loop,
                args=(source, self.interval_for(source)),
                name=f"nse-ingest-{source.name}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        logger.info("Ingestion scheduler started for %d source(s)", len(self._threads))

    def _loop(self, source: Source, interval: int) -> None:
        while not self._stop.is_set():
            try:
                self.pipeline.run_source(source)
            except Exception as exc:  # noqa: BLE001 - keep the timer alive
                logger.exception("Unexpected ingestion error for %s: %s", source.name, exc)
            if self._stop.wait(interval):
                break

    def stop(self, *, timeout: float = 5.0) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        logger.info("Ingestion scheduler stopped")
