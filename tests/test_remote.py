"""Tests for fetching sheet text."""

from __future__ import annotations

import http.server
import threading
from pathlib import Path

import pytest

from choreobook.errors import IngestError, RemoteFetchError, UnsupportedSchemeError
from choreobook.ingest.remote import (
    Fetcher,
    FetcherRegistry,
    HttpFetcher,
    LocalFileFetcher,
    _decode,
    fetch_text,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class _SheetHandler(http.server.BaseHTTPRequestHandler):
    """Serves a fixed body at /sheet.csv and 404 elsewhere."""

    body: bytes = b""
    content_type: str = "text/csv; charset=utf-8"
    hits: list[str] = []

    def do_GET(self):
        self.hits.append(self.path)
        if self.path != "/sheet.csv":
            self.send_error(404, "Not Found")
            return
        self.send_response(200)
        self.send_header("Content-Type", self.content_type)
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, format, *args):
        pass  # suppress log output during tests


@pytest.fixture
def http_server(sample_sheet: str):
    """Start a local HTTP server serving the sample sheet."""
    handler = type(
        "Handler",
        (_SheetHandler,),
        {"body": sample_sheet.encode("utf-8"), "hits": []},
    )
    server = http.server.HTTPServer(("127.0.0.1", 0), handler)
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}", handler
    server.shutdown()
    server.server_close()


# ---------------------------------------------------------------------------
# HttpFetcher
# ---------------------------------------------------------------------------


class TestHttpFetcher:
    def test_fetches_text(self, http_server, sample_sheet):
        base, _ = http_server
        assert HttpFetcher(timeout=5).fetch_text(f"{base}/sheet.csv") == sample_sheet

    def test_one_request_per_call(self, http_server):
        base, handler = http_server
        fetcher = HttpFetcher(timeout=5)
        fetcher.fetch_text(f"{base}/sheet.csv")
        fetcher.fetch_text(f"{base}/sheet.csv")
        assert handler.hits == ["/sheet.csv", "/sheet.csv"]

    def test_not_found(self, http_server):
        base, _ = http_server
        with pytest.raises(RemoteFetchError, match="HTTP 404"):
            HttpFetcher(timeout=5).fetch_text(f"{base}/missing.csv")

    def test_connection_refused(self):
        # Port 9 (discard) is almost never listening on loopback.
        with pytest.raises(RemoteFetchError) as exc_info:
            HttpFetcher(timeout=5).fetch_text("http://127.0.0.1:9/sheet.csv")
        assert exc_info.value.url == "http://127.0.0.1:9/sheet.csv"

    def test_unknown_charset_falls_back_to_utf8(self, http_server, sample_sheet):
        base, handler = http_server
        handler.content_type = "text/csv; charset=x-bogus"
        assert HttpFetcher(timeout=5).fetch_text(f"{base}/sheet.csv") == sample_sheet

    def test_error_is_ingest_error(self):
        assert issubclass(RemoteFetchError, IngestError)

    def test_declared_schemes(self):
        assert HttpFetcher.schemes == ("http", "https")
        assert HttpFetcher(timeout=7).timeout == 7


# ---------------------------------------------------------------------------
# LocalFileFetcher
# ---------------------------------------------------------------------------


class TestLocalFileFetcher:
    def test_bare_path(self, sheet_file: Path, sample_sheet: str):
        assert LocalFileFetcher().fetch_text(str(sheet_file)) == sample_sheet

    def test_file_url(self, sheet_file: Path, sample_sheet: str):
        assert LocalFileFetcher().fetch_text(sheet_file.as_uri()) == sample_sheet

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(RemoteFetchError):
            LocalFileFetcher().fetch_text(str(tmp_path / "nope.csv"))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestFetcherRegistry:
    def test_default_has_builtins(self):
        reg = FetcherRegistry.default()
        assert isinstance(reg.get("http"), HttpFetcher)
        assert isinstance(reg.get("HTTPS"), HttpFetcher)
        assert isinstance(reg.get("file"), LocalFileFetcher)

    def test_default_timeout(self):
        reg = FetcherRegistry.default(timeout=3)
        assert reg.get("https").timeout == 3

    def test_for_url(self, tmp_path: Path):
        reg = FetcherRegistry.default()
        assert isinstance(reg.for_url("https://example.com/a.csv"), HttpFetcher)
        assert isinstance(reg.for_url(str(tmp_path / "a.csv")), LocalFileFetcher)

    def test_unknown_scheme(self):
        with pytest.raises(UnsupportedSchemeError, match="ftp"):
            FetcherRegistry.default().get("ftp")

    def test_register_custom(self):
        class _Echo(Fetcher):
            schemes = ("echo",)

            def fetch_text(self, url: str) -> str:
                return url

        reg = FetcherRegistry()
        reg.register(_Echo())
        assert fetch_text("echo://hello", registry=reg) == "echo://hello"

    def test_empty_registry_lists_none(self):
        with pytest.raises(UnsupportedSchemeError, match=r"\(none\)"):
            FetcherRegistry().get("http")


def test_fetch_text_over_http(http_server, sample_sheet):
    base, _ = http_server
    assert fetch_text(f"{base}/sheet.csv") == sample_sheet


class TestDecode:
    def test_declared_charset(self):
        assert _decode("café".encode("latin-1"), "latin-1") == "café"

    def test_unknown_charset(self):
        assert _decode(b"abc", "x-bogus") == "abc"

    def test_strips_bom(self):
        assert _decode(b"\xef\xbb\xbfabc", None) == "abc"
