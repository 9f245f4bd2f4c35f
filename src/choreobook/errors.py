"""Custom exceptions for Choreobook."""


class ChoreobookError(Exception):
    """Base exception for all Choreobook errors."""


class ConfigError(ChoreobookError):
    """Raised for configuration file issues."""


class ProjectNotInitializedError(ConfigError):
    """Raised when no choreobook.toml can be found."""

    def __init__(self, path: str = "."):
        super().__init__(
            f"No choreobook.toml found at '{path}'. Run 'choreobook init' first "
            "or pass --url."
        )


class IngestError(ChoreobookError):
    """Raised for data ingest issues."""


class RemoteFetchError(IngestError):
    """Raised when the source sheet cannot be fetched."""

    def __init__(self, url: str, reason: object):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class UnsupportedSchemeError(IngestError):
    """Raised when no fetcher handles a URL scheme."""

    def __init__(self, scheme: str, supported: list[str]):
        listed = ", ".join(sorted(supported)) or "(none)"
        super().__init__(
            f"No fetcher registered for scheme '{scheme}'. "
            f"Supported schemes: {listed}"
        )
        self.scheme = scheme


class ParseError(IngestError):
    """Raised when the delimited text cannot be read at all."""
