"""Choreobook CLI — fetch, validate and list choreography sheets."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from choreobook import __version__
from choreobook.config import (
    CONFIG_FILENAME,
    ChoreobookConfig,
    SourceConfig,
    load_config,
    load_config_file,
)
from choreobook.errors import ChoreobookError, ProjectNotInitializedError
from choreobook.pipeline import ChoreographyFeed, IngestResult

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _get_config(ctx: click.Context) -> ChoreobookConfig:
    """Load config, attaching it to the Click context.

    Without a config file the defaults (and environment overrides) apply.
    """
    if "config" not in ctx.obj:
        config_path = ctx.obj.get("config_path")
        try:
            if config_path:
                config = load_config_file(Path(config_path))
            else:
                config = load_config()
        except ProjectNotInitializedError:
            if config_path:
                raise
            config = ChoreobookConfig()
        level = logging.DEBUG if ctx.obj.get("verbose") else config.log_level
        logging.basicConfig(level=level, format=LOG_FORMAT)
        ctx.obj["config"] = config
    return ctx.obj["config"]


def _fetch(ctx: click.Context, url: str | None) -> IngestResult:
    try:
        config = _get_config(ctx)
        feed = ChoreographyFeed.from_config(config, url=url)
        return feed.fetch()
    except ChoreobookError as exc:
        raise click.ClickException(str(exc)) from exc


# ======================================================================
# Root group
# ======================================================================


@click.group()
@click.version_option(__version__, prog_name="choreobook")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Path to {CONFIG_FILENAME} (default: search upward from the current directory).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Choreobook — fetch, validate and list choreography sheets."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ======================================================================
# init
# ======================================================================


@main.command()
@click.option("--url", default="", help="Sheet export URL (CSV).")
@click.option(
    "--path",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory to write the config into (default: current directory).",
)
def init(url: str, path: str) -> None:
    """Write a choreobook.toml."""
    root = Path(path).resolve()
    target = root / CONFIG_FILENAME
    if target.exists():
        raise click.ClickException(f"{target} already exists.")

    config = ChoreobookConfig(source=SourceConfig(), project_root=root)
    # Keep the URL out of the file when it only came from the environment.
    config.source.url = url
    config.save()
    click.echo(f"Wrote {target}")


# ======================================================================
# list
# ======================================================================


@main.command("list")
@click.option("--url", default=None, help="Override the configured sheet URL.")
@click.option("--json", "as_json", is_flag=True, help="Print entries as JSON.")
@click.pass_context
def list_(ctx: click.Context, url: str | None, as_json: bool) -> None:
    """Fetch the sheet and print its valid entries."""
    from choreobook.display import format_entry

    result = _fetch(ctx, url)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in result.records], indent=2))
        return

    if not result.records:
        click.echo("No valid choreographies found.")
        return
    for record in result.records:
        click.echo(format_entry(record))
    if result.rejections:
        click.echo(
            f"\n{len(result.rejections)} row(s) skipped; run 'choreobook check' for details.",
            err=True,
        )


# ======================================================================
# check
# ======================================================================


@main.command()
@click.argument("source", required=False)
@click.pass_context
def check(ctx: click.Context, source: str | None) -> None:
    """Validate a sheet (URL or local file) and report rejected rows."""
    result = _fetch(ctx, source)
    click.echo(result.summary())
    if not result.is_clean:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
