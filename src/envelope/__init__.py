"""Response envelope: the cacheable snapshot of an HTTP outcome."""

from src.envelope.constants import (
    CLIENT_ERROR_STATUSES,
    SERVER_ERROR_STATUSES,
    SUCCESS_STATUSES,
)
from src.envelope.models import CacheTuple, ResponseEnvelope


__all__ = [
    "CLIENT_ERROR_STATUSES",
    "SERVER_ERROR_STATUSES",
    "SUCCESS_STATUSES",
    "CacheTuple",
    "ResponseEnvelope",
]
