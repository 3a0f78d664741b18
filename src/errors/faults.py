"""Error taxonomy for outbound API requests.

Every failure the request pipeline can surface is an ``ApiRequestError``
carrying a ``FaultKind`` so calling code can branch on blame: the caller's
own integration code, the remote party, or the transport in between.
"""

from enum import Enum
from typing import TYPE_CHECKING, ClassVar


if TYPE_CHECKING:
    from src.envelope.models import ResponseEnvelope


class FaultKind(str, Enum):
    """Who is to blame for a failed request.

    - PREREQUISITE: preparation step failed before any network activity
    - CALLER: the request was malformed before send (our fault)
    - UPSTREAM: the remote response was unreadable or invalid (their fault)
    - TRANSPORT: non-2xx status or connection-level failure
    - UNIMPLEMENTED_HOOK: a request type omits a required capability
    """

    PREREQUISITE = "PREREQUISITE"
    CALLER = "CALLER"
    UPSTREAM = "UPSTREAM"
    TRANSPORT = "TRANSPORT"
    UNIMPLEMENTED_HOOK = "UNIMPLEMENTED_HOOK"


class TransportErrorClass(str, Enum):
    """Sub-classification of transport failures.

    - HTTP_4XX: remote rejected the request (client fault)
    - HTTP_5XX: remote failed to serve the request (server fault)
    - NETWORK_TIMEOUT: request timed out
    - CONNECTION_ERROR: could not establish or keep a connection
    - UNKNOWN: unclassified transport error
    """

    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNKNOWN = "UNKNOWN"


class ApiRequestError(Exception):
    """Base exception for all request pipeline failures.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status this failure maps to when presented upstream.
        response: Remote response attached to the failure, if any.
        details: Additional structured error details.
    """

    fault_kind: ClassVar[FaultKind] = FaultKind.CALLER
    default_status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: "ResponseEnvelope | None" = None,
        details: dict[str, object] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            status_code: Override for the presented HTTP status.
            response: Remote response attached to the failure.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.status_code = (
            status_code if status_code is not None else self.default_status_code
        )
        self.response = response
        self.details = details or {}

    @property
    def blames_upstream(self) -> bool:
        """Whether the remote party is at fault."""
        return self.fault_kind == FaultKind.UPSTREAM

    def to_dict(self) -> dict[str, object]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "fault_kind": self.fault_kind.value,
            "error_type": type(self).__name__,
            "message": self.message,
            "status_code": self.status_code,
            "remote_status_code": (
                self.response.status_code if self.response is not None else None
            ),
            "details": self.details,
        }


class PrerequisiteError(ApiRequestError):
    """Raised when a request's preparation step fails.

    Never logged, never cached: no network activity has happened yet.
    """

    fault_kind = FaultKind.PREREQUISITE


class CallerError(ApiRequestError):
    """The request was malformed before send.

    Blames the integration code, e.g. missing configuration or an outbound
    body that fails its schema.
    """

    fault_kind = FaultKind.CALLER


class BadRequestError(CallerError):
    """Data is missing to make a proper request."""

    default_status_code = 400


class RemoteAuthenticationError(CallerError):
    """Our authentication to the remote service failed."""

    default_status_code = 401

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "Could not authenticate to the remote service")


class UpstreamError(ApiRequestError):
    """The remote response was unreadable, invalid, or carried an error payload.

    Presented as 502 Bad Gateway: we are but a gateway to the remote party.
    """

    fault_kind = FaultKind.UPSTREAM
    default_status_code = 502


class NotFoundError(UpstreamError):
    """The remote service does not know the requested resource."""

    default_status_code = 404

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "Not found")


class TransportError(ApiRequestError):
    """Non-2xx status or connection-level failure from the transport."""

    fault_kind = FaultKind.TRANSPORT
    error_class: ClassVar[TransportErrorClass] = TransportErrorClass.UNKNOWN
    default_status_code = 502

    def to_dict(self) -> dict[str, object]:
        """Convert error to dictionary, including the transport classification."""
        result = super().to_dict()
        result["error_class"] = self.error_class.value
        return result


class ClientError(TransportError):
    """Remote answered with a 4xx status."""

    error_class = TransportErrorClass.HTTP_4XX


class ServerError(TransportError):
    """Remote answered with a 5xx status."""

    error_class = TransportErrorClass.HTTP_5XX


class ConnectionFault(TransportError):
    """Network-level failure: no usable response was received."""

    error_class = TransportErrorClass.CONNECTION_ERROR
    default_status_code = 504

    def __init__(
        self,
        message: str,
        error_class: TransportErrorClass = TransportErrorClass.CONNECTION_ERROR,
    ) -> None:
        """Initialize the connection fault.

        Args:
            message: Human-readable error message.
            error_class: NETWORK_TIMEOUT, CONNECTION_ERROR or UNKNOWN.
        """
        super().__init__(message)
        self.error_class = error_class  # type: ignore[misc]


class NotImplementedHookError(ApiRequestError):
    """A request type omits a capability it needs right now.

    This is a programmer error, raised the first time the capability is used.
    """

    fault_kind = FaultKind.UNIMPLEMENTED_HOOK
