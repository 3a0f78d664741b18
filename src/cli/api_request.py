"""CLI commands for inspecting the response cache and request logs."""

import asyncio
import json
import logging
import re
import sys
from pathlib import Path

import click
import structlog

from src.cache import SqliteTaggedCache
from src.logfile import LogFile
from src.observability import configure_logging
from src.settings import get_settings


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


def _setup_logging(
    command: str, verbose: bool, json_logs: bool
) -> structlog.typing.FilteringBoundLogger:
    """Configure logging for one command and return a bound logger."""
    configure_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=json_logs,
    )
    return logger.bind(component=COMPONENT_CLI, command=command)  # type: ignore[no-any-return]


def _cache_path(cache_path: Path | None) -> Path:
    return cache_path or get_settings().cache_store_path


def _log_file(logs_path: Path | None) -> LogFile:
    settings = get_settings()
    return LogFile(
        logs_path or settings.logs_storage_path,
        interesting_headers=settings.interesting_response_headers,
    )


cache_option = click.option(
    "--cache",
    "cache_path",
    type=click.Path(path_type=Path),
    default=None,
    help="SQLite cache file (default: API_REQUEST_CACHE_STORE_PATH).",
)
logs_option = click.option(
    "--logs",
    "logs_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Log artifact root (default: API_REQUEST_LOGS_STORAGE_PATH).",
)
json_logs_option = click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON format for logs (default: false).",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Outbound API request cache and log tooling."""


@cli.command("cache-flush")
@click.option("--tag", required=True, help="Tag whose entries are dropped.")
@cache_option
@json_logs_option
@verbose_option
def cache_flush(tag: str, cache_path: Path | None, json_logs: bool, verbose: bool) -> None:
    """Drop every cached response stored under a tag.

    Use after an integration changes what it returns, so stale entries are
    not served until they expire.
    """
    log = _setup_logging("cache-flush", verbose, json_logs)
    path = _cache_path(cache_path)
    if not path.exists():
        click.echo(f"Cache file does not exist: {path}", err=True)
        sys.exit(1)

    with SqliteTaggedCache(path) as cache:
        removed = asyncio.run(cache.flush(tag))

    log.info("cache_flush_complete", tag=tag, removed=removed)
    click.echo(f"Removed {removed} cached responses tagged '{tag}'")


@cli.command("cache-forget")
@click.option("--key", required=True, help="Request fingerprint.")
@click.option("--tag", "tags", multiple=True, help="Cache tag (repeatable).")
@cache_option
@json_logs_option
@verbose_option
def cache_forget(
    key: str,
    tags: tuple[str, ...],
    cache_path: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Drop one cached response by fingerprint and tag set.

    The fingerprint appears as ``fingerprint`` on pipeline log events.
    """
    log = _setup_logging("cache-forget", verbose, json_logs)
    path = _cache_path(cache_path)
    if not path.exists():
        click.echo(f"Cache file does not exist: {path}", err=True)
        sys.exit(1)

    with SqliteTaggedCache(path) as cache:
        removed = asyncio.run(cache.forget(key, tags))

    log.info("cache_forget_complete", key=key, tags=list(tags), removed=removed)
    if not removed:
        click.echo(f"No cached response for {key}", err=True)
        sys.exit(1)
    click.echo(f"Removed cached response {key}")


@cli.command("logs")
@click.option(
    "--folder",
    default="",
    help="Folder below the log root; empty lists everything.",
)
@click.option("--like", "pattern", default="", help="Regex the artifact path must match.")
@logs_option
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def list_logs(folder: str, pattern: str, logs_path: Path | None, json_output: bool) -> None:
    """List request log artifacts, oldest first."""
    configure_logging(level=logging.WARNING, json_format=False)
    try:
        names = _log_file(logs_path).files_like(folder, pattern)
    except re.error as e:
        raise click.BadParameter(str(e), param_hint="--like") from e

    if json_output:
        click.echo(json.dumps(names, indent=2))
        return
    for name in names:
        click.echo(name)


@cli.command("show-log")
@click.argument("folder")
@click.argument("artifact")
@logs_option
def show_log(folder: str, artifact: str, logs_path: Path | None) -> None:
    """Print one log artifact."""
    configure_logging(level=logging.WARNING, json_format=False)
    try:
        click.echo(_log_file(logs_path).read(folder, artifact))
    except FileNotFoundError:
        click.echo(f"Error: no log artifact {folder}/{artifact}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
