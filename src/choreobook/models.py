"""Domain types for choreography sheets."""

from __future__ import annotations

from dataclasses import dataclass, fields
import datetime
from enum import Enum
from typing import Any


class WarningTag(Enum):
    EXPLICIT = "explicit"
    CHALLENGING = "challenging"
    CONTENT_STRIKE = "content_strike"


class Difficulty(Enum):
    BEGINNER = "beginner"
    REGULAR = "regular"
    EXPERT = "expert"
    CARDIO = "cardio"


@dataclass(frozen=True)
class RawChoreography:
    """One sheet row, positionally mapped and not yet validated."""

    title: str
    warnings: str
    artists: str
    choreographer: str
    difficulties: str
    bpm: str
    length: str
    date: str
    link: str
    notes: str

    @classmethod
    def from_cells(cls, cells: list[str]) -> "RawChoreography":
        return cls(*cells)


#: Column order of the sheet after the banner rows.
RAW_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(RawChoreography))


@dataclass(frozen=True)
class Choreography:
    """A transformed choreography entry.

    ``bpm`` and ``length`` are ``None`` when the source cell is not a number;
    validation rejects such entries.  ``date`` is ``None`` when the cell
    cannot be read as a calendar date.
    """

    id: str
    title: str
    warnings: tuple[WarningTag, ...]
    artists: tuple[str, ...]
    choreographer: str
    difficulties: tuple[Difficulty, ...]
    bpm: int | None
    length: int | None
    date: datetime.date | None
    link: str
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "warnings": [w.value for w in self.warnings],
            "artists": list(self.artists),
            "choreographer": self.choreographer,
            "difficulties": [d.value for d in self.difficulties],
            "bpm": self.bpm,
            "length": self.length,
            "date": self.date.isoformat() if self.date else None,
            "link": self.link,
            "notes": self.notes,
        }
