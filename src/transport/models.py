"""Data models for the transport layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class HttpMethod(str, Enum):
    """Request methods an API request may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class PreparedRequest(BaseModel):
    """Fully prepared outgoing request, as handed to the transport.

    Built from an API request after prerequisites ran; the same snapshot
    is sent, fingerprinted and written to the log artifact.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: HttpMethod = Field(description="HTTP method")
    url: Annotated[str, Field(min_length=1, description="Resolved request URL")]
    headers: dict[str, str] = Field(
        default_factory=dict, description="Request headers"
    )
    body: bytes | None = Field(default=None, description="Encoded request body")
