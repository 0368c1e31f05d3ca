"""Generative backends (Ollama, Gemini) used for briefing narratives."""

from .base import AIClient

__all__ = ["AIClient"]
