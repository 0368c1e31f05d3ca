"""Processing stages: normalization, deduplication, scoring and briefing narratives."""

from .normalize import clean_html_to_text, normalize_plain_text, normalize_raw_article, parse_timestamp
from .dedup import article_id, dedup_key, should_replace
from .scoring import DEGRADED_REASON, Scorer
from .narrative import BriefingDraft, Narrative, Narrator, create_narrator, template_narrative

__all__ = [
    "clean_html_to_text",
    "normalize_plain_text",
    "normalize_raw_article",
    "parse_timestamp",
    "article_id",
    "dedup_key",
    "should_replace",
    "DEGRADED_REASON",
    "Scorer",
    "BriefingDraft",
    "Narrative",
    "Narrator",
    "create_narrator",
    "template_narrative",
]
