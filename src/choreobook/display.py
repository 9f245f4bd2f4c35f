"""Plain-text rendering of choreography entries."""

from __future__ import annotations

import datetime

from choreobook.models import Choreography


def format_length(seconds: int | None) -> str:
    """``mm:ss`` with minutes wrapped at 60."""
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(seconds, 60)
    minutes %= 60
    return f"{minutes:02d}:{secs:02d}"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(value: datetime.date | None) -> str:
    """``2023-01-02`` -> ``2nd January 2023``."""
    if value is None:
        return "unknown date"
    return f"{_ordinal(value.day)} {value.strftime('%B')} {value.year}"


def capitalize_words(text: str) -> str:
    """Upper-case the first letter of each space-separated word only."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def format_entry(choreography: Choreography) -> str:
    artists = ", ".join(choreography.artists)
    heading = capitalize_words(
        f"{artists} - {choreography.title} [{format_length(choreography.length)}]"
    )
    byline = (
        f"By {choreography.choreographer}, {format_date(choreography.date)}"
        f" - {choreography.bpm} BPM"
    )
    return f"{heading}\n  {byline}"
