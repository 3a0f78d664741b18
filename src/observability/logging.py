"""Structured logging for the request pipeline."""

import logging
import sys
from collections.abc import Mapping
from typing import Any, TextIO

import structlog

from src.logfile.redact import redact_headers, redact_url


# httpx logs every request URL at INFO, credentials included
NOISY_LIBRARY_LOGGERS = ("httpx", "httpcore")


def redact_event_secrets(
    _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Redact ``url`` and ``headers`` keys on any event.

    Log calls pass raw request data freely; this processor keeps secrets
    out of the rendered line regardless of the call site.
    """
    url = event_dict.get("url")
    if isinstance(url, str):
        event_dict["url"] = redact_url(url)
    headers = event_dict.get("headers")
    if isinstance(headers, Mapping):
        event_dict["headers"] = redact_headers(headers)
    return event_dict


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for pipeline events.

    Args:
        level: Minimum level, as a number or a name such as ``"debug"``.
        output: Stream the rendered events go to.
        json_format: JSON lines when True, coloured console output otherwise.

    Raises:
        ValueError: If ``level`` is an unknown name.
    """
    threshold = _resolve_level(level)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_format
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_event_secrets,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=threshold)
    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(threshold, logging.WARNING))


def bind_request_context(request_type: str, fingerprint: str) -> None:
    """Bind the in-flight request to all subsequent log messages.

    Context variables are task-local under asyncio, so concurrent
    pipeline runs do not see each other's bindings.

    Args:
        request_type: Name of the request type being executed.
        fingerprint: Cache fingerprint of the request.
    """
    structlog.contextvars.bind_contextvars(
        request_type=request_type, fingerprint=fingerprint
    )


def clear_request_context() -> None:
    """Forget the request bound by ``bind_request_context``."""
    structlog.contextvars.unbind_contextvars("request_type", "fingerprint")
