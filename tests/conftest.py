"""Shared test fixtures."""

from __future__ import annotations

import csv
import io
import textwrap
from pathlib import Path

import pytest

from choreobook.models import RAW_COLUMNS, RawChoreography

LINK = "https://cdn.discordapp.com/attachments/1/2/song.mp3"

BANNER = [
    ["Choreography list", "", "", "", "", "", "", "", "", ""],
    ["Warnings: [E] explicit [C] challenging [X] content strike", "", "", "", "", "", "", "", "", ""],
    ["Title", "Warnings", "Artists", "Choreographer", "Difficulty", "BPM", "Length", "Date", "Link", "Notes"],
]


def raw_row(**overrides: str) -> RawChoreography:
    """A well-formed sheet row; keyword arguments replace single cells."""
    cells = {
        "title": "Counting Stars",
        "warnings": "[E]",
        "artists": "OneRepublic",
        "choreographer": "Jane",
        "difficulties": "Exp",
        "bpm": "120",
        "length": "3:45",
        "date": "2023-01-02",
        "link": LINK,
        "notes": "",
    }
    cells.update(overrides)
    return RawChoreography(**cells)


def sheet_text(*rows: RawChoreography | list[str]) -> str:
    """Render *rows* below the banner as CSV text."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(BANNER)
    for row in rows:
        if isinstance(row, RawChoreography):
            writer.writerow([getattr(row, name) for name in RAW_COLUMNS])
        else:
            writer.writerow(row)
    return buf.getvalue()


@pytest.fixture
def sample_sheet() -> str:
    return sheet_text(
        raw_row(),
        raw_row(title="Bad Link", link="not-a-link"),
        raw_row(
            title="Shake It Off",
            warnings="",
            artists="Taylor Swift & Jack Antonoff",
            choreographer="Sam",
            difficulties="EZ / Cardio",
            bpm="160",
            length="3:39",
            date="2022-08-14",
            notes="  mirrored  ",
        ),
        raw_row(title="No Tempo", bpm="abc"),
    )


@pytest.fixture
def sheet_file(tmp_path: Path, sample_sheet: str) -> Path:
    f = tmp_path / "sheet.csv"
    f.write_text(sample_sheet, encoding="utf-8")
    return f


@pytest.fixture
def tmp_project(tmp_path: Path, sheet_file: Path) -> Path:
    """A directory holding a choreobook.toml that points at ``sheet_file``."""
    config_content = textwrap.dedent(f"""\
        [source]
        url = "{sheet_file.as_uri()}"
        skip_rows = 3
        timeout = 5

        [logging]
        level = "debug"
    """)
    (tmp_path / "choreobook.toml").write_text(config_content)
    return tmp_path


@pytest.fixture(autouse=True)
def _no_url_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CHOREOBOOK_CSV_URL", raising=False)
    monkeypatch.delenv("CSV_URL", raising=False)
