"""Observability module for logging and metrics."""

from src.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    redact_event_secrets,
)
from src.observability.metrics import PipelineMetrics


__all__ = [
    "PipelineMetrics",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "redact_event_secrets",
]
