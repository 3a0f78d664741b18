"""Wire a pipeline to the default adapters described by the settings."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog

from src.cache import SqliteTaggedCache
from src.logfile import LogFile
from src.request.pipeline import RequestPipeline
from src.settings import ApiRequestSettings, get_settings
from src.transport import HttpxTransport


logger = structlog.get_logger()


@asynccontextmanager
async def open_pipeline(
    settings: ApiRequestSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[RequestPipeline]:
    """Open a pipeline over SQLite, httpx and the filesystem log.

    Args:
        settings: Configuration; read from the environment when omitted.
        transport: Low-level httpx transport (e.g. an ``HttpTapper``'s).

    Yields:
        A ready pipeline. The cache and the HTTP client are closed on exit.
    """
    settings = settings or get_settings()
    log_file = LogFile(
        settings.logs_storage_path,
        interesting_headers=settings.interesting_response_headers,
    )
    logger.info(
        "pipeline_opening",
        cache_store_path=str(settings.cache_store_path),
        logs_storage_path=str(settings.logs_storage_path),
    )

    with SqliteTaggedCache(settings.cache_store_path) as cache:
        async with HttpxTransport(transport=transport) as http:
            yield RequestPipeline(cache, http, log_file, settings)
