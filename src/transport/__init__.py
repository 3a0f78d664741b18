"""Transport layer: prepared requests and the httpx adapter that sends them."""

from src.transport.httpx_transport import (
    HttpxTransport,
    classify_status,
    envelope_from_httpx,
)
from src.transport.models import HttpMethod, PreparedRequest
from src.transport.port import TransportPort


__all__ = [
    "HttpMethod",
    "HttpxTransport",
    "PreparedRequest",
    "TransportPort",
    "classify_status",
    "envelope_from_httpx",
]
