"""Transport adapter on top of httpx.AsyncClient."""

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from src.envelope import (
    CLIENT_ERROR_STATUSES,
    SERVER_ERROR_STATUSES,
    ResponseEnvelope,
)
from src.errors import (
    ClientError,
    ConnectionFault,
    ServerError,
    TransportError,
    TransportErrorClass,
)
from src.logfile.redact import redact_headers, redact_url
from src.transport.models import PreparedRequest


logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 30.0


def envelope_from_httpx(response: httpx.Response) -> ResponseEnvelope:
    """Snapshot an httpx response into an envelope.

    Args:
        response: A response whose body has been read.

    Returns:
        The equivalent envelope, keeping repeated headers.
    """
    headers: dict[str, list[str]] = {}
    for key, value in response.headers.multi_items():
        headers.setdefault(key, []).append(value)
    return ResponseEnvelope(
        status_code=response.status_code,
        headers=headers,
        body=response.content,
        protocol_version=response.http_version.removeprefix("HTTP/"),
        reason_phrase=response.reason_phrase,
    )


def classify_status(
    envelope: ResponseEnvelope, request: PreparedRequest
) -> TransportError | None:
    """Classify an HTTP status code as a transport error.

    Args:
        envelope: Response received from the remote.
        request: Request that produced the response.

    Returns:
        ClientError for 4xx, ServerError for 5xx, None otherwise.
    """
    status_code = envelope.status_code
    url = redact_url(request.url)

    if status_code in CLIENT_ERROR_STATUSES:
        return ClientError(
            f"Client error ({status_code}) from {request.method.value} {url}",
            response=envelope,
        )

    if status_code in SERVER_ERROR_STATUSES:
        return ServerError(
            f"Server error ({status_code}) from {request.method.value} {url}",
            response=envelope,
        )

    return None


class HttpxTransport:
    """Send prepared requests with an ``httpx.AsyncClient``.

    Retries, pooling, proxies and TLS are the client's business; this
    adapter only converts between the pipeline's value types and httpx,
    and classifies failures.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        follow_redirects: bool = True,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Pre-configured client to use; not closed by ``aclose``.
            transport: Low-level transport for an owned client
                (e.g. ``httpx.MockTransport`` in tests).
            timeout: Default timeout in seconds for an owned client.
            follow_redirects: Whether an owned client follows redirects.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport,
            timeout=timeout,
            follow_redirects=follow_redirects,
        )
        self._log = logger.bind(component="transport")

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.aclose()

    async def send(
        self,
        request: PreparedRequest,
        options: Mapping[str, Any] | None = None,
    ) -> ResponseEnvelope:
        """Send a request and classify the outcome.

        Args:
            request: Fully prepared outgoing request.
            options: Extra keyword arguments for ``AsyncClient.build_request``
                (``timeout``, ``extensions``, ...).

        Returns:
            The remote response for non-error statuses.

        Raises:
            ClientError: Remote answered 4xx.
            ServerError: Remote answered 5xx.
            ConnectionFault: No response was received.
        """
        log = self._log.bind(
            method=request.method.value,
            url=redact_url(request.url),
            headers=redact_headers(request.headers),
        )
        httpx_request = self._client.build_request(
            request.method.value,
            request.url,
            headers=request.headers,
            content=request.body,
            **dict(options or {}),
        )

        try:
            response = await self._client.send(httpx_request)
        except httpx.TimeoutException as e:
            log.warning("transport_timeout", error=str(e))
            raise ConnectionFault(
                f"Request timed out: {e}", TransportErrorClass.NETWORK_TIMEOUT
            ) from e
        except httpx.TransportError as e:
            log.warning("transport_connection_failed", error=str(e))
            raise ConnectionFault(f"Connection failed: {e}") from e
        except httpx.RequestError as e:
            log.warning("transport_failed", error=str(e))
            raise ConnectionFault(
                f"Unexpected error: {e}", TransportErrorClass.UNKNOWN
            ) from e

        envelope = envelope_from_httpx(response)
        log.debug(
            "transport_response",
            status_code=envelope.status_code,
            bytes=len(envelope.body),
        )

        error = classify_status(envelope, request)
        if error is not None:
            raise error
        return envelope
