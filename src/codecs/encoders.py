"""Encoding strategies: request body to wire bytes plus content headers."""

import json
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import urlencode
from xml.etree.ElementTree import Element, tostring

from src.codecs.schema import check_schema, schema_errors
from src.errors import CallerError, NotImplementedHookError


if TYPE_CHECKING:
    from src.request.descriptor import ApiRequest


CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"
CONTENT_TYPE_XML = "text/xml"


class Encoder(Protocol):
    """Turns a request's body into wire bytes.

    ``encode`` is called both for the transport call and for the cache
    fingerprint, so it must be deterministic for a given request state.
    """

    def content_headers(self) -> dict[str, str]:
        """Headers describing the encoded body."""
        ...

    def encode(self, request: "ApiRequest") -> bytes | None:
        """Encode the request body, None for no body."""
        ...


def _json_bytes(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


class RawEncoder:
    """Passes bytes and strings through untouched, sends no body for None."""

    def content_headers(self) -> dict[str, str]:
        return {}

    def encode(self, request: "ApiRequest") -> bytes | None:
        body = request.body
        if body is None:
            return None
        if isinstance(body, bytes):
            return body
        return str(body).encode("utf-8")


class JsonEncoder:
    """Encodes the body (almost anything) as compact JSON."""

    def content_headers(self) -> dict[str, str]:
        return {"Content-Type": CONTENT_TYPE_JSON}

    def encode(self, request: "ApiRequest") -> bytes | None:
        return _json_bytes(request.body)


def _form_pairs(value: Any, prefix: str) -> list[tuple[str, str]]:
    """Flatten nested mappings and lists into ``a[b][0]=v`` pairs.

    None values are skipped and booleans become ``1``/``0``, matching the
    bracket convention most form-consuming APIs parse.
    """
    if isinstance(value, Mapping):
        children = value.items()
    elif isinstance(value, list | tuple):
        children = enumerate(value)
    else:
        if value is None:
            return []
        if isinstance(value, bool):
            return [(prefix, "1" if value else "0")]
        return [(prefix, str(value))]

    pairs: list[tuple[str, str]] = []
    for key, child in children:
        pairs.extend(_form_pairs(child, f"{prefix}[{key}]" if prefix else str(key)))
    return pairs


class FormEncoder:
    """Encodes a mapping body as ``application/x-www-form-urlencoded``.

    Nested mappings and lists use bracketed keys:
    ``{"customer": {"zip": "60601"}}`` becomes ``customer%5Bzip%5D=60601``.
    """

    def content_headers(self) -> dict[str, str]:
        return {"Content-Type": CONTENT_TYPE_FORM}

    def encode(self, request: "ApiRequest") -> bytes | None:
        return urlencode(_form_pairs(request.body or {}, "")).encode("ascii")


class XmlEncoder:
    """Serializes an ``Element`` body; strings and bytes pass through."""

    def content_headers(self) -> dict[str, str]:
        return {"Content-Type": CONTENT_TYPE_XML}

    def encode(self, request: "ApiRequest") -> bytes | None:
        body = request.body
        if body is None:
            return None
        if isinstance(body, Element):
            return tostring(body, encoding="utf-8")
        if isinstance(body, bytes):
            return body
        return str(body).encode("utf-8")


class GraphQLEncoder:
    """Wraps a GraphQL query and the body (as variables) into a JSON document.

    The query is either a static string or a callable building it from
    the request state.
    """

    def __init__(
        self, query: "str | Callable[[ApiRequest], str] | None" = None
    ) -> None:
        """Initialize the encoder.

        Args:
            query: GraphQL document, or a callable returning it.
        """
        self._query = query

    def content_headers(self) -> dict[str, str]:
        return {"Content-Type": CONTENT_TYPE_JSON}

    def query_for(self, request: "ApiRequest") -> str:
        """Resolve the GraphQL document for a request.

        Raises:
            NotImplementedHookError: If no query was configured.
        """
        if self._query is None:
            raise NotImplementedHookError(
                f"{request.friendly_name} must provide a GraphQL query "
                "to use GraphQLEncoder"
            )
        if callable(self._query):
            return self._query(request)
        return self._query

    def encode(self, request: "ApiRequest") -> bytes | None:
        return _json_bytes(
            {"query": self.query_for(request), "variables": request.body or {}}
        )


class JsonSchemaEncoder(JsonEncoder):
    """JSON encoder that validates the body against a schema first.

    A mismatch is our own misconfiguration, not the remote party's, so it
    surfaces as a ``CallerError`` with status 500.
    """

    def __init__(self, schema: dict[str, Any]) -> None:
        """Initialize the encoder.

        Args:
            schema: JSON Schema every outbound body must satisfy.
        """
        self._schema = check_schema(schema)

    def encode(self, request: "ApiRequest") -> bytes | None:
        violations = schema_errors(request.body, self._schema)
        if violations:
            raise CallerError(
                f"Unexpected problem with {request.friendly_name} call: "
                "Request does not match expected schema",
                details={"schema_errors": violations},
            )
        return super().encode(request)
