"""Sheet ingest: fetching, row splitting, transformation and validation."""

from choreobook.ingest.parsers import MalformedRow, RawParseResult, read_raw_records
from choreobook.ingest.remote import (
    Fetcher,
    FetcherRegistry,
    HttpFetcher,
    LocalFileFetcher,
    fetch_text,
)
from choreobook.ingest.transform import transform
from choreobook.ingest.validate import Severity, ValidationIssue, validate_choreography

__all__ = [
    # parsers
    "MalformedRow",
    "RawParseResult",
    "read_raw_records",
    # remote
    "Fetcher",
    "FetcherRegistry",
    "HttpFetcher",
    "LocalFileFetcher",
    "fetch_text",
    # transform / validate
    "Severity",
    "ValidationIssue",
    "transform",
    "validate_choreography",
]
