"""Occurrence data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date


@dataclass(frozen=True)
class Occurrence:
    """A single observation record as retained by the loader."""

    record_id: str
    seq: int  # position in the source file, used for stable tie-breaks
    scientific_name: str
    event_date: date
    region: str
    flowering: bool
    family: str = ""
    genus: str = ""


@dataclass
class LoadReport:
    """Row counters for one load, keyed by drop reason."""

    rows_read: int = 0
    rows_kept: int = 0
    dropped: dict[str, int] = field(default_factory=dict)

    def drop(self, reason: str, count: int = 1) -> None:
        if count:
            self.dropped[reason] = self.dropped.get(reason, 0) + count

    @property
    def rows_dropped(self) -> int:
        return sum(self.dropped.values())
