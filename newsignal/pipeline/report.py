from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..models.article import format_timestamp


@dataclass(slots=True)
class SourceResult:
    source: str
    fetched: int = 0
    inserted: int = 0
    replaced: int = 0
    duplicates: int = 0
    filtered: int = 0
    invalid: int = 0
    degraded: int = 0
    failed: bool = False
    error: Optional[str] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "fetched": self.fetched,
            "inserted": self.inserted,
            "replaced": self.replaced,
            "duplicates": self.duplicates,
            "filtered": self.filtered,
            "invalid": self.invalid,
            "degraded": self.degraded,
            "failed": self.failed,
            "error": self.error,
            "finishedAt": format_timestamp(self.finished_at) if self.finished_at else None,
        }


@dataclass(slots=True)
class CycleReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    sources: List[SourceResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for s in self.sources if not s.failed)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.sources if s.failed)

    @property
    def inserted(self) -> int:
        return sum(s.inserted for s in self.sources)

    @property
    def duplicates(self) -> int:
        return sum(s.duplicates for s in self.sources)

    def to_dict(self) -> dict:
        return {
            "startedAt": format_timestamp(self.started_at),
            "finishedAt": format_timestamp(self.finished_at) if self.finished_at else None,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "inserted": self.inserted,
            "duplicates": self.duplicates,
            "sources": [s.to_dict() for s in self.sources],
        }

    def to_markdown(self) -> str:
        lines = [
            "### Ingestion Summary",
            "",
            f"- Sources ok: {self.succeeded}",
            f"- Sources failed: {self.failed}",
            f"- Articles inserted: {self.inserted}",
            f"- Duplicates skipped: {self.duplicates}",
        ]
        for s in self.sources:
            if s.failed:
                lines.append(f"- {s.source}: FAILED ({s.error})")
        return "\n".join(lines) + "\n"
