"""Splitting raw sheet text into positional rows, backed by PyArrow.

The sheet starts with a few banner rows that are discarded.  Every row after
that is mapped positionally onto the ten `RawChoreography` columns.  Rows with
a different number of cells are not forced into shape; they are reported as
`MalformedRow` entries so the caller can reject them explicitly.

Both kinds of row carry the 1-based source line they start on, so callers can
report them in sheet order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Union

import pyarrow as pa
import pyarrow.csv as pcsv

from choreobook.errors import ParseError
from choreobook.models import RAW_COLUMNS, RawChoreography

logger = logging.getLogger(__name__)


def _first_cell(text: str) -> str:
    """First cell of a single CSV row, split the same way the sheet is."""
    try:
        table = pcsv.read_csv(
            pa.BufferReader(text.encode("utf-8")),
            read_options=pcsv.ReadOptions(autogenerate_column_names=True, use_threads=False),
            parse_options=pcsv.ParseOptions(newlines_in_values=True),
            convert_options=pcsv.ConvertOptions(
                include_columns=["f0"],
                column_types={"f0": pa.string()},
                strings_can_be_null=False,
            ),
        )
    except pa.ArrowInvalid:
        return ""
    if table.num_rows == 0:
        return ""
    return (table.column("f0")[0].as_py() or "").strip()


@dataclass(frozen=True)
class MalformedRow:
    """A data row whose cell count does not match the sheet layout."""

    line: int | None
    text: str
    expected: int
    actual: int

    @property
    def title(self) -> str:
        """Best-effort title: the first cell of the row."""
        return _first_cell(self.text)


SheetRow = Union[RawChoreography, MalformedRow]


@dataclass
class RawParseResult:
    """Rows read from one sheet.

    ``row_lines[i]`` is the source line of ``rows[i]``, or ``None`` when it
    could not be determined.
    """

    rows: list[RawChoreography] = field(default_factory=list)
    row_lines: list[int | None] = field(default_factory=list)
    malformed: list[MalformedRow] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows) + len(self.malformed)

    def in_source_order(self) -> Iterator[tuple[int | None, SheetRow]]:
        """Yield ``(line, row)`` for every row, sorted by line (unknown last)."""
        entries: list[tuple[int | None, SheetRow]] = list(zip(self.row_lines, self.rows))
        entries.extend((m.line, m) for m in self.malformed)
        entries.sort(key=lambda e: (e[0] is None, e[0] or 0))
        yield from entries


def _record_starts(text: str) -> list[tuple[int, bool]]:
    """Return ``(start_line, is_blank)`` for each physical CSV record.

    Newlines inside double-quoted cells do not end a record.
    """
    records: list[tuple[int, bool]] = []
    line = start = 1
    in_quotes = False
    blank = True
    for ch in text:
        if ch == "\n":
            line += 1
            if not in_quotes:
                records.append((start, blank))
                start, blank = line, True
            continue
        if ch == '"':
            in_quotes = not in_quotes
        if ch != "\r":
            blank = False
    if not blank:
        records.append((start, blank))
    return records


def _data_lines(text: str, skip_rows: int) -> list[int]:
    """Start lines of the non-blank records after the first *skip_rows*.

    Skipped rows include blank ones, as PyArrow counts them.
    """
    return [start for start, blank in _record_starts(text)[skip_rows:] if not blank]


def read_raw_records(text: str, skip_rows: int = 3) -> RawParseResult:
    """Parse *text* into `RawChoreography` rows after skipping *skip_rows*.

    Raises `ParseError` if PyArrow cannot read the text at all.
    """
    result = RawParseResult()
    data_lines = _data_lines(text, skip_rows)
    if not data_lines:
        return result

    def on_invalid_row(row: pcsv.InvalidRow) -> str:
        result.malformed.append(
            MalformedRow(
                line=row.number,
                text=row.text,
                expected=row.expected_columns,
                actual=row.actual_columns,
            )
        )
        return "skip"

    read_opts = pcsv.ReadOptions(
        column_names=list(RAW_COLUMNS),
        skip_rows=skip_rows,
        use_threads=False,
    )
    parse_opts = pcsv.ParseOptions(
        delimiter=",",
        newlines_in_values=True,
        invalid_row_handler=on_invalid_row,
    )
    convert_opts = pcsv.ConvertOptions(
        column_types={name: pa.string() for name in RAW_COLUMNS},
        strings_can_be_null=False,
        quoted_strings_can_be_null=False,
    )

    try:
        table = pcsv.read_csv(
            pa.BufferReader(text.encode("utf-8")),
            read_options=read_opts,
            parse_options=parse_opts,
            convert_options=convert_opts,
        )
    except pa.ArrowInvalid as exc:
        if "Empty CSV file" in str(exc):
            return result
        raise ParseError(f"Cannot read sheet text: {exc}") from exc

    for record in table.to_pylist():
        cells = [record[name] or "" for name in RAW_COLUMNS]
        result.rows.append(RawChoreography.from_cells(cells))

    bad_lines = {m.line for m in result.malformed}
    row_lines: list[int | None] = [n for n in data_lines if n not in bad_lines]
    if len(row_lines) != len(result.rows):
        logger.debug(
            "Could not align %d row(s) with %d source line(s)",
            len(result.rows),
            len(row_lines),
        )
        row_lines = [None] * len(result.rows)
    result.row_lines = row_lines
    return result
