"""Transport port: sends prepared requests."""

from collections.abc import Mapping
from typing import Any, Protocol

from src.envelope import ResponseEnvelope
from src.transport.models import PreparedRequest


class TransportPort(Protocol):
    """Protocol for sending a prepared request.

    Implementations return the remote response for 1xx-3xx statuses and
    raise a classified ``TransportError`` otherwise: ``ClientError`` for
    4xx, ``ServerError`` for 5xx (both carrying the response), and
    ``ConnectionFault`` when no response was received.
    """

    async def send(
        self,
        request: PreparedRequest,
        options: Mapping[str, Any] | None = None,
    ) -> ResponseEnvelope:
        """Send a request.

        Args:
            request: Fully prepared outgoing request.
            options: Per-request transport options (timeouts, etc.),
                opaque to the pipeline.

        Returns:
            The remote response.
        """
        ...
