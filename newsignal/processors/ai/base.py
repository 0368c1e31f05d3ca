from __future__ import annotations

from abc import ABC, abstractmethod


class AIClient(ABC):
    """Abstract text-generation client."""

    @abstractmethod
    def generate(self, prompt: str, *, timeout: float = 30.0) -> str:
        """Return the model's completion for ``prompt``.

        Implementations must bound the underlying request by ``timeout`` seconds.
        """
