"""In-memory article storage with dedup-aware upserts."""

from .article_store import ArticleStore, QueryFilter, UpsertResult

__all__ = ["ArticleStore", "QueryFilter", "UpsertResult"]
