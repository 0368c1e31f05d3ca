from __future__ import annotations

import html
import re
from dataclasses import replace
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
import unicodedata

from bs4 import BeautifulSoup

from ..models import RawArticle
from ..utils.logging import get_logger

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")
_tag_hint_re = re.compile(r"<[a-zA-Z/!][^>]*>")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u2013"): "-",  # en dash
    ord("\u2014"): "-",  # em dash
    ord("\u00A0"): " ",  # non-breaking space
}

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%Y/%m/%d", "%d.%m.%Y")

_logger = get_logger("nse.processors.normalize")


def clean_html_to_text(raw_html: str | None) -> str:
    """Clean HTML to normalized plain text.

    - Strip tags
    - Unescape HTML entities
    - Collapse whitespace
    """
    if not raw_html:
        return ""
    if not _tag_hint_re.search(raw_html):
        # plain text; skip the parser but still unescape entities
        return _whitespace_re.sub(" ", html.unescape(raw_html)).strip()

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text("\n")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text for downstream processing.

    - Ensure string type and strip BOM
    - Unicode normalize (NFKC)
    - Replace curly quotes/dashes and non-breaking spaces
    - Remove control characters
    - Collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFKC", text)
    text = _control_chars_re.sub(" ", text)
    text = _whitespace_re.sub(" ", text).strip()
    return text


def _as_utc(dt: datetime) -> datetime:
    # naive values are assumed to already be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: str | datetime | None) -> Optional[datetime]:
    """Parse a publication time into an aware UTC datetime.

    Accepts datetimes, ISO 8601 strings (a trailing ``Z`` included), RFC 2822
    strings as found in RSS feeds and a few plain date formats. Returns
    ``None`` when the value cannot be interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)

    text = str(value).strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass

    try:
        return _as_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        pass

    for fmt in _DATE_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    _logger.debug("Unparseable timestamp: %r", value)
    return None


def normalize_raw_article(raw: RawArticle, *, fetched_at: datetime) -> RawArticle:
    """Return a copy of ``raw`` with cleaned text and a UTC timestamp.

    Items without a usable publication time are stamped with ``fetched_at``.
    """
    timestamp = parse_timestamp(raw.timestamp)
    if timestamp is None:
        _logger.debug("No publication time for '%s'; using fetch time", raw.title)
        timestamp = _as_utc(fetched_at)

    return replace(
        raw,
        title=normalize_plain_text(clean_html_to_text(raw.title)),
        summary=normalize_plain_text(clean_html_to_text(raw.summary)),
        url=(raw.url or "").strip(),
        source=normalize_plain_text(raw.source),
        timestamp=timestamp,
        raw_category_hint=(raw.raw_category_hint or "").strip().lower() or None,
        assets_hint=[a.strip().upper() for a in raw.assets_hint if a and a.strip()],
    )
