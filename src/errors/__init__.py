"""Error taxonomy shared by every stage of the request pipeline."""

from src.errors.faults import (
    ApiRequestError,
    BadRequestError,
    CallerError,
    ClientError,
    ConnectionFault,
    FaultKind,
    NotFoundError,
    NotImplementedHookError,
    PrerequisiteError,
    RemoteAuthenticationError,
    ServerError,
    TransportError,
    TransportErrorClass,
    UpstreamError,
)


__all__ = [
    "ApiRequestError",
    "BadRequestError",
    "CallerError",
    "ClientError",
    "ConnectionFault",
    "FaultKind",
    "NotFoundError",
    "NotImplementedHookError",
    "PrerequisiteError",
    "RemoteAuthenticationError",
    "ServerError",
    "TransportError",
    "TransportErrorClass",
    "UpstreamError",
]
