"""Application entrypoint for the News Signal Engine.

This script wires the high-level flow:
1) load configuration (.env, engine settings, sources YAML)
2) build the store, scorer, read engines and ingestion pipeline
3) either run one ingestion cycle (--once) or serve the HTTP API while the
   scheduler keeps polling the sources
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from .api import create_app
from .engine import NewsSignalEngine
from .pipeline.ingestion import IngestionPipeline, IngestionScheduler
from .utils.config_loader import load_sources_config
from .utils.logging import configure_logging, get_logger
from .utils.settings import EngineSettings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="News Signal Engine: ingest, score and serve crypto news signals"
    )
    parser.add_argument(
        "--config",
        default="config/sources.yaml",
        help="Path to sources configuration file (YAML)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single ingestion cycle, print the report as JSON and exit",
    )
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Serve the API without polling sources",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API server")
    parser.add_argument("--port", type=int, default=8000, help="Port for the API server")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (defaults to LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("nse.agent")

    config_path = Path(args.config)
    logger.info("Loading sources configuration from %s", config_path)
    try:
        sources = load_sources_config(config_path)
    except Exception as exc:  # noqa: BLE001 - top-level entrypoint guard
        logger.exception("Failed to load configuration: %s", exc)
        return 1
    logger.info("Loaded %d source(s)", len(sources))

    settings = EngineSettings.from_env()
    engine = NewsSignalEngine.from_settings(settings)
    pipeline = IngestionPipeline(
        engine.store,
        engine.scorer,
        fetch_timeout=settings.ingest_fetch_timeout,
    )

    if args.once:
        report = pipeline.run_cycle(sources)
        print(json.dumps(report.to_dict(), indent=2))
        engine.close()
        return 0 if report.failed == 0 else 2

    scheduler = None
    if not args.no_scheduler and sources:
        scheduler = IngestionScheduler(pipeline, sources, default_interval=settings.ingest_interval_seconds)

    app = create_app(engine, pipeline=pipeline, scheduler=scheduler)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
