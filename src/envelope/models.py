"""Immutable snapshot of an HTTP outcome."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.envelope.constants import (
    BODY_STRING_ENCODING,
    BODY_STRING_ERRORS,
    DEFAULT_PROTOCOL_VERSION,
    SUCCESS_STATUSES,
)


CacheTuple = tuple[int, dict[str, list[str]], str, str, str]


class ResponseEnvelope(BaseModel):
    """Status, headers, body and protocol metadata of a remote response.

    Stored in the cache as an ordered tuple matching the constructor order
    ``(status_code, headers, body, protocol_version, reason_phrase)``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers, possibly repeated"
    )
    body: bytes = Field(default=b"", description="Response body")
    protocol_version: str = Field(
        default=DEFAULT_PROTOCOL_VERSION, description="HTTP protocol version"
    )
    reason_phrase: str = Field(default="", description="HTTP reason phrase")

    @property
    def is_success(self) -> bool:
        """Check if the status code is 2xx."""
        return self.status_code in SUCCESS_STATUSES

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, with undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        """Get the first value of a header, case-insensitively.

        Args:
            name: Header name.

        Returns:
            First header value, or None if absent.
        """
        lowered = name.lower()
        for key, values in self.headers.items():
            if key.lower() == lowered and values:
                return values[0]
        return None

    def to_cache_tuple(self) -> CacheTuple:
        """Flatten into the tuple shape stored by the cache."""
        return (
            self.status_code,
            {key: list(values) for key, values in self.headers.items()},
            self.body.decode(BODY_STRING_ENCODING, errors=BODY_STRING_ERRORS),
            self.protocol_version,
            self.reason_phrase,
        )

    @classmethod
    def from_cache_tuple(cls, stored: Any) -> "ResponseEnvelope":
        """Rehydrate an envelope from its cache tuple.

        Args:
            stored: Tuple or list previously produced by ``to_cache_tuple``.

        Returns:
            The reconstructed envelope.
        """
        status_code, headers, body, protocol_version, reason_phrase = stored
        return cls(
            status_code=int(status_code),
            headers={key: list(values) for key, values in headers.items()},
            body=body.encode(BODY_STRING_ENCODING, errors=BODY_STRING_ERRORS),
            protocol_version=protocol_version,
            reason_phrase=reason_phrase,
        )
