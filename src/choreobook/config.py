"""Project configuration for Choreobook."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import toml

from choreobook.errors import ConfigError, ProjectNotInitializedError

CONFIG_FILENAME = "choreobook.toml"
DEFAULT_SKIP_ROWS = 3
DEFAULT_TIMEOUT = 120
DEFAULT_LOG_LEVEL = "WARNING"

# Checked in order; the first one set wins.
URL_ENV_VARS = ("CHOREOBOOK_CSV_URL", "CSV_URL")


@dataclass
class SourceConfig:
    url: str = ""
    skip_rows: int = DEFAULT_SKIP_ROWS
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        for var in URL_ENV_VARS:
            value = os.environ.get(var)
            if value:
                self.url = value
                break


@dataclass
class ChoreobookConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    log_level: str = DEFAULT_LOG_LEVEL
    project_root: Path = field(default_factory=lambda: Path.cwd())

    @property
    def config_file(self) -> Path:
        return self.project_root / CONFIG_FILENAME

    def require_url(self) -> str:
        """Return the configured source URL or raise `ConfigError`."""
        if not self.source.url:
            raise ConfigError(
                f"No source URL configured. Set [source] url in {CONFIG_FILENAME}, "
                f"export {URL_ENV_VARS[0]}, or pass --url."
            )
        return self.source.url

    def to_dict(self) -> dict:
        return {
            "source": {
                "url": self.source.url,
                "skip_rows": self.source.skip_rows,
                "timeout": self.source.timeout,
            },
            "logging": {
                "level": self.log_level,
            },
        }

    def save(self, path: Path | None = None) -> None:
        target = path or self.config_file
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w") as f:
            toml.dump(self.to_dict(), f)


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from *start* looking for choreobook.toml."""
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / CONFIG_FILENAME).exists():
            return current
        parent = current.parent
        if parent == current:
            raise ProjectNotInitializedError(str(start or Path.cwd()))
        current = parent


def _int_setting(section: dict, key: str, default: int) -> int:
    value = section.get(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Setting '{key}' must be an integer, got {value!r}") from exc
    if number < 0:
        raise ConfigError(f"Setting '{key}' must not be negative, got {number}")
    return number


def _log_level(section: dict) -> str:
    level = str(section.get("level", DEFAULT_LOG_LEVEL)).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown logging level {level!r}")
    return level


def load_config_file(config_path: Path) -> ChoreobookConfig:
    """Load the configuration stored at *config_path*."""
    if not config_path.exists():
        raise ProjectNotInitializedError(str(config_path.parent))

    try:
        data = toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    src = data.get("source", {})
    log = data.get("logging", {})

    source = SourceConfig(
        url=str(src.get("url", "")).strip(),
        skip_rows=_int_setting(src, "skip_rows", DEFAULT_SKIP_ROWS),
        timeout=_int_setting(src, "timeout", DEFAULT_TIMEOUT),
    )

    return ChoreobookConfig(
        source=source,
        log_level=_log_level(log),
        project_root=config_path.parent,
    )


def load_config(project_root: Path | None = None) -> ChoreobookConfig:
    """Load and return the project configuration."""
    root = project_root or find_project_root()
    return load_config_file(root / CONFIG_FILENAME)
