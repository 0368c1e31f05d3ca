"""Logging configuration utilities.

One entry point, :func:`configure_logging`, sets up the root logger for the
API server, the ingestion scheduler threads and one-shot ``--once`` runs.
Application loggers live under the ``nse.`` namespace; uvicorn's loggers are
re-routed through the root handlers so every line shares one format.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Literal, Optional

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_OUTPUT = os.environ.get("LOG_OUTPUT", "stdout").lower()
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs/news-signal-engine.log")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text").lower()

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

APP_LOGGER = "nse"
TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s"

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_K8S_TOKEN_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; tracebacks go in ``exc_info``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def is_kubernetes_env() -> bool:
    """Container deployments log to stdout unless told otherwise."""
    return bool(
        os.environ.get("K8S_CLUSTER")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
        or os.path.exists(_K8S_TOKEN_DIR)
    )


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonLineFormatter()
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    app_level: str | int | None = None,
) -> None:
    """Configure application logging.

    Parameters
    ----------
    level:
        Root logging level, e.g. ``"INFO"``; defaults to ``LOG_LEVEL``.
    output:
        ``"stdout"``, ``"file"`` or ``"both"``; defaults to ``LOG_OUTPUT``
        (forced to stdout on Kubernetes when ``LOG_OUTPUT`` is unset).
    file_path:
        Rotating log file used for ``"file"``/``"both"``; defaults to ``LOG_FILE_PATH``.
    log_format:
        ``"text"`` or ``"json"``; defaults to ``LOG_FORMAT``.
    app_level:
        Optional separate level for the ``nse.*`` loggers, e.g. ``DEBUG`` for
        the engine while keeping third-party libraries at ``INFO``.
    """
    # read env at call time: main() loads .env before calling this
    if level is None:
        level = os.environ.get("LOG_LEVEL", LOG_LEVEL)
    if isinstance(level, str):
        level = level.upper()
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or LOG_FORMAT).lower()
    if output is None:
        if is_kubernetes_env() and "LOG_OUTPUT" not in os.environ:
            output = "stdout"
        else:
            output = (os.environ.get("LOG_OUTPUT") or LOG_OUTPUT).lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or LOG_FILE_PATH

    formatter = _build_formatter(log_format)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if output in ("stdout", "both"):
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(formatter)
        root_logger.addHandler(stdout_handler)

    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    logging.getLogger(APP_LOGGER).setLevel(app_level.upper() if isinstance(app_level, str) else (app_level or level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
