"""HTTP API for the News Signal Engine."""

from .app import create_app

__all__ = ["create_app"]
