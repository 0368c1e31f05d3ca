from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml

from ..models import CATEGORIES, Source


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"name", "url", "type"}
SOURCE_TYPES = ("rss", "http")

# Category hints must use the vocabulary the scorer emits.
ALLOWED_CATEGORIES = set(CATEGORIES)

_TICKER_RE = re.compile(r"^[A-Za-z0-9]{2,10}$")


def _optional_str_list(entry: Dict[str, Any], key: str) -> List[str]:
    value = entry.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings if provided")
    return [v.strip() for v in value]


def _check_url(raw: Any) -> str:
    url = str(raw).strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url}'. Must be absolute http(s) URL.")
    return url


def _check_category_hints(hints: List[str]) -> List[str]:
    invalid = sorted({h for h in hints if h not in ALLOWED_CATEGORIES})
    if invalid:
        raise ConfigError(
            f"Invalid category_hints: {', '.join(invalid)}. Allowed: {sorted(ALLOWED_CATEGORIES)}"
        )
    return hints


def _check_assets(assets: List[str]) -> List[str]:
    if not all(_TICKER_RE.match(a) for a in assets):
        raise ConfigError("'assets' must be a list of ticker symbols (2-10 alphanumerics) if provided")
    return [a.upper() for a in assets]


def _check_headers(entry: Dict[str, Any]) -> Dict[str, str]:
    headers = entry.get("headers")
    if headers is None:
        return {}
    if not isinstance(headers, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in headers.items()):
        raise ConfigError("'headers' must be a mapping of string keys to string values if provided")
    return dict(headers)


def _check_interval(entry: Dict[str, Any]) -> Optional[int]:
    interval = entry.get("interval_seconds")
    if interval is None:
        return None
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise ConfigError("'interval_seconds' must be a positive integer if provided")
    return interval


def parse_source(entry: Dict[str, Any]) -> Source:
    """Validate one source mapping from YAML and build a :class:`Source`.

    Required fields: name (str), url (http/https), type ('rss' | 'http').
    Optional fields:
      - keywords: list[str], items must mention one of them to be ingested
      - category_hints: list[str] from ALLOWED_CATEGORIES
      - assets: list[str] of tickers attached to every item of the source
      - headers: mapping[str, str] sent with every request
      - interval_seconds: positive int polling period
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    source_type = str(entry["type"]).strip()
    if source_type not in SOURCE_TYPES:
        raise ConfigError(f"Invalid type '{entry['type']}'. Must be 'rss' or 'http'.")

    url = _check_url(entry["url"])
    keywords = _optional_str_list(entry, "keywords")
    hints = _check_category_hints(_optional_str_list(entry, "category_hints"))
    assets = _check_assets(_optional_str_list(entry, "assets"))

    return Source(
        name=str(entry["name"]).strip(),
        url=url,
        type=source_type,
        keywords=keywords,
        category_hints=hints,
        assets=assets,
        headers=_check_headers(entry),
        interval_seconds=_check_interval(entry),
    )


def load_sources_config(path: Path | str) -> List[Source]:
    """Load ``sources.yaml`` into typed ``Source`` instances.

    YAML structure: a top-level mapping whose ``sources`` key holds a list of
    source mappings (see :func:`parse_source`). Source names must be unique.
    Unknown top-level keys are ignored.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping")

    entries = data.get("sources") or []
    if not isinstance(entries, list):
        raise ConfigError("'sources' must be a list in the YAML configuration")

    sources: List[Source] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigError(f"Each source must be a mapping, got: {type(entry)}")
        source = parse_source(entry)
        if source.name in seen:
            raise ConfigError(f"Duplicate source name '{source.name}'")
        seen.add(source.name)
        sources.append(source)
    return sources
