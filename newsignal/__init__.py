"""Top-level package for the News Signal Engine.

This package contains the ingestion pipeline, the scorer, the in-memory
article store and the read-side engines (news queries, briefings and
alerts) together with the HTTP API that exposes them.
"""

__all__ = []
