from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

SourceType = Literal["rss", "http"]


@dataclass(slots=True)
class Source:
    """Configuration for a content source (RSS or HTTP)."""

    name: str
    url: str
    type: SourceType
    keywords: List[str] = field(default_factory=list)
    category_hints: List[str] = field(default_factory=list)
    assets: List[str] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    # Polling period for this source; falls back to the engine default when unset.
    interval_seconds: Optional[int] = None
