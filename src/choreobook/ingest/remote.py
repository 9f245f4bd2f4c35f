"""Fetching the raw sheet text with protocol-based dispatch.

Every call performs exactly one retrieval.  Nothing is cached between calls
and failed retrievals are not retried.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar
from urllib.parse import unquote, urlparse

from choreobook import __version__
from choreobook.errors import RemoteFetchError, UnsupportedSchemeError

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def _decode(body: bytes, charset: str | None) -> str:
    try:
        text = body.decode(charset or "utf-8", errors="replace")
    except LookupError:
        logger.debug("Unknown charset %r, decoding as UTF-8", charset)
        text = body.decode("utf-8", errors="replace")
    return text[1:] if text.startswith(_BOM) else text


# ---------------------------------------------------------------------------
# Abstract fetcher
# ---------------------------------------------------------------------------


class Fetcher(ABC):
    """Protocol handler that knows how to read text for a URL scheme."""

    #: Schemes this fetcher handles, e.g. ``("https", "http")``.
    schemes: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def fetch_text(self, url: str) -> str:
        """Retrieve *url* and return the body as text.

        Raises `RemoteFetchError` when the source cannot be read.
        """


# ---------------------------------------------------------------------------
# HTTP / HTTPS fetcher
# ---------------------------------------------------------------------------


class HttpFetcher(Fetcher):
    """Fetch text over HTTP / HTTPS using :mod:`urllib.request`."""

    schemes: ClassVar[tuple[str, ...]] = ("http", "https")

    def __init__(self, timeout: int | None = 120) -> None:
        self._timeout = timeout

    @property
    def timeout(self) -> int | None:
        return self._timeout

    def fetch_text(self, url: str) -> str:
        req = urllib.request.Request(
            url, headers={"User-Agent": f"choreobook/{__version__}"}
        )
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
                charset = resp.headers.get_content_charset()
        except urllib.error.HTTPError as exc:
            raise RemoteFetchError(url, f"HTTP {exc.code} {exc.reason}") from exc
        except urllib.error.URLError as exc:
            raise RemoteFetchError(url, exc.reason) from exc
        except OSError as exc:
            raise RemoteFetchError(url, exc) from exc

        logger.debug("Fetched %d bytes from %s", len(body), url)
        return _decode(body, charset)


# ---------------------------------------------------------------------------
# Local file fetcher
# ---------------------------------------------------------------------------


class LocalFileFetcher(Fetcher):
    """Read a sheet exported to disk (``file://`` URLs or bare paths)."""

    schemes: ClassVar[tuple[str, ...]] = ("file", "")

    def fetch_text(self, url: str) -> str:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        try:
            body = path.read_bytes()
        except OSError as exc:
            raise RemoteFetchError(url, exc) from exc
        return _decode(body, None)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_BUILTIN_FETCHERS: list[type[Fetcher]] = [HttpFetcher, LocalFileFetcher]


def _scheme_of(url: str) -> str:
    scheme = urlparse(url).scheme.lower()
    # Windows drive letters ("C:\\...") parse as a one-letter scheme.
    return "" if len(scheme) == 1 else scheme


class FetcherRegistry:
    """Maps URL schemes to `Fetcher` instances."""

    def __init__(self) -> None:
        self._fetchers: dict[str, Fetcher] = {}

    def register(self, fetcher: Fetcher) -> None:
        """Register a fetcher for all of its declared schemes."""
        for scheme in fetcher.schemes:
            self._fetchers[scheme.lower()] = fetcher

    def get(self, scheme: str) -> Fetcher:
        """Look up the fetcher for *scheme*, raising if unknown."""
        try:
            return self._fetchers[scheme.lower()]
        except KeyError:
            raise UnsupportedSchemeError(scheme, [s for s in self._fetchers if s])

    def for_url(self, url: str) -> Fetcher:
        return self.get(_scheme_of(url))

    @classmethod
    def default(cls, timeout: int | None = 120) -> "FetcherRegistry":
        """Return a registry pre-loaded with the built-in fetchers."""
        reg = cls()
        for fetcher_cls in _BUILTIN_FETCHERS:
            if fetcher_cls is HttpFetcher:
                reg.register(HttpFetcher(timeout=timeout))
            else:
                reg.register(fetcher_cls())
        return reg


def fetch_text(url: str, *, registry: FetcherRegistry | None = None) -> str:
    """Fetch *url* with the fetcher registered for its scheme."""
    reg = registry or FetcherRegistry.default()
    return reg.for_url(url).fetch_text(url)
