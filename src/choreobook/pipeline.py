"""Fetch → parse → validate pipeline producing the displayable entries.

Rejected rows never raise: they are returned as `Rejection` entries next to
the valid records and logged.  Only fetch and unreadable-text failures
propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from choreobook.config import DEFAULT_SKIP_ROWS, ChoreobookConfig
from choreobook.ingest.parsers import MalformedRow, read_raw_records
from choreobook.ingest.remote import Fetcher, FetcherRegistry
from choreobook.ingest.transform import transform
from choreobook.ingest.validate import (
    Severity,
    ValidationIssue,
    column_count_issue,
    has_errors,
    validate_choreography,
)
from choreobook.models import Choreography

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rejection:
    """A sheet row left out of the result, with every reason for it."""

    line: int | None
    title: str
    issues: tuple[ValidationIssue, ...]

    @property
    def columns(self) -> list[str]:
        return [i.column for i in self.issues if i.column]

    def __str__(self) -> str:
        return f'Choreography "{self.title}" is invalid: {", ".join(self.columns)}'


@dataclass
class IngestResult:
    """Valid entries in source order plus the rows that were dropped."""

    records: list[Choreography] = field(default_factory=list)
    rejections: list[Rejection] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.rejections

    def summary(self) -> str:
        total = len(self.records) + len(self.rejections)
        lines = [f"{len(self.records)} of {total} row(s) valid."]
        if self.rejections:
            lines.append(f"{len(self.rejections)} row(s) rejected:")
        for rejection in self.rejections:
            lines.append(f"  {rejection}")
            for issue in rejection.issues:
                lines.append(f"    {issue}")
        if self.warnings:
            lines.append(f"{len(self.warnings)} warning(s):")
            for issue in self.warnings:
                lines.append(f"  {issue}")
        return "\n".join(lines)


def _reject(result: IngestResult, rejection: Rejection) -> None:
    result.rejections.append(rejection)
    logger.warning(
        'Choreography "%s" is invalid: %s',
        rejection.title,
        "; ".join(f"{i.column}: {i.message}" for i in rejection.issues),
    )


def ingest_text(text: str, skip_rows: int = DEFAULT_SKIP_ROWS) -> IngestResult:
    """Parse and validate sheet *text*.  Pure: the same text gives the same result."""
    raw = read_raw_records(text, skip_rows=skip_rows)
    result = IngestResult()

    for line, row in raw.in_source_order():
        if isinstance(row, MalformedRow):
            _reject(
                result,
                Rejection(line=line, title=row.title, issues=(column_count_issue(row),)),
            )
            continue

        choreography = transform(row)
        issues = validate_choreography(choreography, row=line)
        if has_errors(issues):
            _reject(
                result,
                Rejection(
                    line=line,
                    title=choreography.title,
                    issues=tuple(i for i in issues if i.severity == Severity.ERROR),
                ),
            )
            continue
        for issue in issues:
            logger.info('Choreography "%s": %s', choreography.title, issue)
        result.warnings.extend(issues)
        result.records.append(choreography)

    logger.debug(
        "Ingested %d row(s): %d valid, %d rejected",
        raw.row_count,
        len(result.records),
        len(result.rejections),
    )
    return result


class ChoreographyFeed:
    """A configured sheet source.  Each `fetch` re-downloads and re-validates."""

    def __init__(
        self,
        url: str,
        *,
        fetcher: Fetcher | None = None,
        skip_rows: int = DEFAULT_SKIP_ROWS,
        timeout: int | None = 120,
    ) -> None:
        self._url = url
        self._fetcher = fetcher or FetcherRegistry.default(timeout=timeout).for_url(url)
        self._skip_rows = skip_rows

    @classmethod
    def from_config(cls, config: ChoreobookConfig, url: str | None = None) -> "ChoreographyFeed":
        return cls(
            url or config.require_url(),
            skip_rows=config.source.skip_rows,
            timeout=config.source.timeout,
        )

    @property
    def url(self) -> str:
        return self._url

    def fetch(self) -> IngestResult:
        text = self._fetcher.fetch_text(self._url)
        return ingest_text(text, skip_rows=self._skip_rows)
