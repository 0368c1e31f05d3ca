from __future__ import annotations

import difflib
import hashlib
from datetime import datetime, timezone

from .normalize import normalize_plain_text

# Summaries at least this similar are treated as the same report.
SUMMARY_CHANGE_THRESHOLD = 0.9

ARTICLE_ID_LENGTH = 16


def publish_day(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).strftime("%Y-%m-%d")


def dedup_key(title: str, source: str, timestamp: datetime) -> str:
    """Content-derived key: normalized title, source and UTC publish day."""
    t_norm = normalize_plain_text(title or "").lower()
    s_norm = normalize_plain_text(source or "").lower()
    normalized = t_norm + "\n" + s_norm + "\n" + publish_day(timestamp)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def article_id(title: str, source: str, timestamp: datetime) -> str:
    return dedup_key(title, source, timestamp)[:ARTICLE_ID_LENGTH]


def summary_similarity(a: str, b: str) -> float:
    return difflib.SequenceMatcher(
        None, normalize_plain_text(a).lower(), normalize_plain_text(b).lower()
    ).ratio()


def is_material_change(old_summary: str, new_summary: str, *, threshold: float = SUMMARY_CHANGE_THRESHOLD) -> bool:
    return summary_similarity(old_summary, new_summary) < threshold


def should_replace(existing_ts: datetime, existing_summary: str, new_ts: datetime, new_summary: str) -> bool:
    """Last-scored-wins, but only for a strictly newer, materially different report."""
    return new_ts > existing_ts and is_material_change(existing_summary, new_summary)
