"""Request log artifacts: the logger port and its filesystem adapter."""

from src.logfile.port import LoggerPort
from src.logfile.redact import (
    REDACTED_VALUE,
    SENSITIVE_HEADERS,
    SENSITIVE_QUERY_PARAMS,
    is_sensitive_header,
    redact_headers,
    redact_url,
)
from src.logfile.writer import (
    LogFile,
    NoLogArtifactError,
    artifact_name,
    beautify_if_json,
)


__all__ = [
    "REDACTED_VALUE",
    "SENSITIVE_HEADERS",
    "SENSITIVE_QUERY_PARAMS",
    "LogFile",
    "LoggerPort",
    "NoLogArtifactError",
    "artifact_name",
    "beautify_if_json",
    "is_sensitive_header",
    "redact_headers",
    "redact_url",
]
