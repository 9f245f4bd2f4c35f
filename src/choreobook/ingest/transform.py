"""Turning positional sheet rows into typed `Choreography` entries.

Tag detection is table driven: each table is an ordered sequence of
``(markers, tag)`` pairs and a tag is emitted once when any of its markers
occurs in the cell.  Table order is output order.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Iterable

from choreobook.models import Choreography, Difficulty, RawChoreography, WarningTag

WARNING_MARKERS: tuple[tuple[tuple[str, ...], WarningTag], ...] = (
    (("[E]",), WarningTag.EXPLICIT),
    (("[C]",), WarningTag.CHALLENGING),
    (("[X]",), WarningTag.CONTENT_STRIKE),
)

DIFFICULTY_KEYWORDS: tuple[tuple[tuple[str, ...], Difficulty], ...] = (
    (("easy", "ez", "beginner"), Difficulty.BEGINNER),
    (("regular", "reg"), Difficulty.REGULAR),
    (("expert", "exp"), Difficulty.EXPERT),
    (("cardio",), Difficulty.CARDIO),
)

DEFAULT_DIFFICULTY = Difficulty.REGULAR

_ARTIST_SEPARATOR = re.compile(r"[,&]")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Accepted after ISO parsing fails. Numeric slashed dates are month first.
_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d %B, %Y",
    "%d %b, %Y",
)


def _match_tags(text: str, table: Iterable[tuple[tuple[str, ...], object]]) -> list:
    return [tag for markers, tag in table if any(m in text for m in markers)]


def parse_warnings(text: str) -> tuple[WarningTag, ...]:
    """Detect ``[E]``, ``[C]`` and ``[X]`` markers."""
    return tuple(_match_tags(text, WARNING_MARKERS))


def parse_artists(text: str) -> tuple[str, ...]:
    """Split on ``,`` or ``&``, then trim and lower-case each name.

    An empty cell yields ``("",)``; validation flags it rather than
    dropping the row.
    """
    return tuple(part.strip().lower() for part in _ARTIST_SEPARATOR.split(text))


def parse_difficulties(text: str) -> tuple[Difficulty, ...]:
    tags = _match_tags(text.lower(), DIFFICULTY_KEYWORDS)
    return tuple(tags) if tags else (DEFAULT_DIFFICULTY,)


def parse_int(text: str) -> int | None:
    """Read the leading integer of *text* (``"120 bpm"`` -> 120).

    Returns ``None`` when the text does not start with a number.
    """
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def parse_length(text: str) -> int | None:
    """Convert ``minutes:seconds`` into seconds; ``None`` if malformed."""
    parts = text.split(":")
    if len(parts) < 2:
        return None
    minutes, seconds = parse_int(parts[0]), parse_int(parts[1])
    if minutes is None or seconds is None:
        return None
    return minutes * 60 + seconds


def parse_date(text: str) -> date | None:
    value = text.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def generate_id(title: str, artists: Iterable[str], choreographer: str) -> str:
    """Join title, artists and choreographer with ``-`` and lower-case it."""
    return "-".join([title, *artists, choreographer]).lower()


def transform(raw: RawChoreography) -> Choreography:
    """Build a `Choreography` from a sheet row.  Never raises on bad cells."""
    title = raw.title.strip()
    artists = parse_artists(raw.artists)
    choreographer = raw.choreographer.strip()

    return Choreography(
        id=generate_id(title, artists, choreographer),
        title=title,
        warnings=parse_warnings(raw.warnings),
        artists=artists,
        choreographer=choreographer,
        difficulties=parse_difficulties(raw.difficulties),
        bpm=parse_int(raw.bpm),
        length=parse_length(raw.length),
        date=parse_date(raw.date),
        link=raw.link.strip(),
        notes=raw.notes.strip() or None,
    )
