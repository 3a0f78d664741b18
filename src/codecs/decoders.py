"""Decoding strategies: response bytes to an application value.

Failures here are presented as "our vendor gave us bad output", never
"you gave me bad input": they raise ``UpstreamError`` (502 Bad Gateway).
"""

import json
from typing import TYPE_CHECKING, Any, Protocol
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from src.codecs.schema import check_schema, schema_errors
from src.errors import UpstreamError


if TYPE_CHECKING:
    from src.request.descriptor import ApiRequest


ACCEPT_JSON = "application/json"


class Decoder(Protocol):
    """Turns response bytes into the value handed to post-processing."""

    def accept_headers(self) -> dict[str, str]:
        """Headers announcing the format we parse."""
        ...

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        """Decode a response body."""
        ...


def parse_json_or_raise(body: bytes, request: "ApiRequest") -> Any:
    """Parse JSON, blaming the remote party when it is unreadable.

    Args:
        body: Response body.
        request: Request the body answers, for error messages.

    Returns:
        Any JSON value.

    Raises:
        UpstreamError: If the body is not valid JSON.
    """
    try:
        return json.loads(body)
    except ValueError as e:
        raise UpstreamError(
            f"Problem in {request.friendly_name}, response was unreadable."
        ) from e


class RawDecoder:
    """Returns the body as text."""

    def accept_headers(self) -> dict[str, str]:
        return {}

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        return body.decode("utf-8", errors="replace")


class JsonDecoder:
    """Lenient JSON: unreadable bodies decode to None."""

    def accept_headers(self) -> dict[str, str]:
        return {"Accept": ACCEPT_JSON}

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        try:
            return json.loads(body)
        except ValueError:
            return None


class JsonOrThrowDecoder:
    """Strict JSON: unreadable bodies raise ``UpstreamError``."""

    def accept_headers(self) -> dict[str, str]:
        return {"Accept": ACCEPT_JSON}

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        return parse_json_or_raise(body, request)


class JsonSchemaDecoder(JsonOrThrowDecoder):
    """Strict JSON that must also match a schema."""

    def __init__(self, schema: dict[str, Any]) -> None:
        """Initialize the decoder.

        Args:
            schema: JSON Schema every response body must satisfy.
        """
        self._schema = check_schema(schema)

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        parsed = parse_json_or_raise(body, request)
        violations = schema_errors(parsed, self._schema)
        if violations:
            raise UpstreamError(
                f"Unexpected problem with {request.friendly_name} call: "
                "Response does not match expected schema",
                details={"schema_errors": violations},
            )
        return parsed


class XmlDecoder:
    """Parses the body into an ``Element`` with entity expansion disabled."""

    def accept_headers(self) -> dict[str, str]:
        return {}

    def decode(self, body: bytes, request: "ApiRequest") -> Element:
        try:
            return DefusedET.fromstring(body)
        except (ParseError, DefusedXmlException) as e:
            raise UpstreamError(
                f"Problem in {request.friendly_name}, response was unreadable."
            ) from e


class GraphQLDecoder:
    """Unwraps the ``data`` member of a GraphQL response.

    A populated ``errors`` member fails the call even though the transport
    saw a 2xx status.
    """

    def accept_headers(self) -> dict[str, str]:
        return {"Accept": ACCEPT_JSON}

    def decode(self, body: bytes, request: "ApiRequest") -> Any:
        parsed = parse_json_or_raise(body, request)
        if not isinstance(parsed, dict):
            raise UpstreamError(
                f"{request.friendly_name} received no data from the server!"
            )

        errors = parsed.get("errors") or []
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = (
                first.get("message") if isinstance(first, dict) else None
            ) or "Unspecified GraphQL error"
            raise UpstreamError(
                f"Trouble calling {request.friendly_name}: {message}",
                details={"errors": errors},
            )

        if "data" not in parsed:
            raise UpstreamError(
                f"{request.friendly_name} received no data from the server!"
            )
        return parsed["data"]
