from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

# Injectable time source for windowed reads and caches.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
