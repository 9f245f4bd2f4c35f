"""Validation rules applied to each transformed choreography.

Every rule is evaluated so a rejected entry reports all of its problems,
not just the first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from choreobook.ingest.parsers import MalformedRow
from choreobook.models import Choreography

LINK_PATTERN = re.compile(r"https://cdn\.discordapp\.com/attachments/\d+/\d+/.+")


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation problem.  *row* is the 1-based source line."""

    row: int | None
    column: str | None
    message: str
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        loc = ""
        if self.row is not None:
            loc += f"line {self.row}"
        if self.column:
            loc += f", column '{self.column}'" if loc else f"column '{self.column}'"
        prefix = f"[{self.severity.value.upper()}]"
        if loc:
            return f"{prefix} {loc}: {self.message}"
        return f"{prefix} {self.message}"


@dataclass(frozen=True)
class Rule:
    """A predicate over a choreography; *check* returns ``True`` when it holds."""

    column: str
    message: str
    check: Callable[[Choreography], bool]
    severity: Severity = Severity.ERROR


RULES: tuple[Rule, ...] = (
    Rule("title", "Title is required", lambda c: len(c.title) > 0),
    Rule("artists", "At least one artist is required", lambda c: len(c.artists) > 0),
    Rule("choreographer", "Choreographer is required", lambda c: len(c.choreographer) > 0),
    Rule(
        "difficulties",
        "At least one difficulty is required",
        lambda c: len(c.difficulties) > 0,
    ),
    Rule("bpm", "BPM is required", lambda c: c.bpm is not None),
    Rule("length", "Length is required", lambda c: c.length is not None),
    Rule("link", "Link is invalid", lambda c: LINK_PATTERN.fullmatch(c.link) is not None),
    Rule(
        "artists",
        "Artist name is blank",
        lambda c: all(c.artists),
        severity=Severity.WARNING,
    ),
)


def validate_choreography(
    choreography: Choreography,
    row: int | None = None,
    rules: tuple[Rule, ...] = RULES,
) -> list[ValidationIssue]:
    """Return every issue *choreography* has against *rules*."""
    return [
        ValidationIssue(row=row, column=rule.column, message=rule.message, severity=rule.severity)
        for rule in rules
        if not rule.check(choreography)
    ]


def column_count_issue(malformed: MalformedRow) -> ValidationIssue:
    return ValidationIssue(
        row=malformed.line,
        column="columns",
        message=f"Expected {malformed.expected} columns, got {malformed.actual}",
    )


def has_errors(issues: list[ValidationIssue]) -> bool:
    return any(i.severity == Severity.ERROR for i in issues)
