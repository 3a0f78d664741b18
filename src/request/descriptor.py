"""Request types and the per-call request descriptor.

A ``RequestType`` holds everything that is the same for every call to one
integration: its name, how to derive the URL, how to encode the body and
decode the response, and its hooks. An ``ApiRequest`` is one call: mutable
state (arguments, headers, body, cache switches) that the pipeline consumes.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.codecs import Decoder, Encoder, RawDecoder, RawEncoder
from src.request.hooks import RequestHooks
from src.request.models import CachePolicy, PipelineRun
from src.request.naming import friendly_name
from src.transport import HttpMethod, PreparedRequest


UrlBuilder = Callable[["ApiRequest"], str]


@dataclass(frozen=True)
class RequestType:
    """Definition of one outbound integration.

    Attributes:
        name: Type identity; part of every cache fingerprint.
        url: Derives the URL from request state. Must be stable: equal
            state must give an equal URL.
        encoder: Body encoding strategy.
        decoder: Response decoding strategy.
        hooks: Lifecycle hooks.
        method: Default HTTP method.
        cache_tags: Default tags grouping this type's cache entries.
        cache_policy: Default cache and logging switches.
        transport_options: Default options handed to the transport.
    """

    name: str
    url: UrlBuilder
    encoder: Encoder = field(default_factory=RawEncoder)
    decoder: Decoder = field(default_factory=RawDecoder)
    hooks: RequestHooks = field(default_factory=RequestHooks)
    method: HttpMethod = HttpMethod.POST
    cache_tags: tuple[str, ...] = ()
    cache_policy: CachePolicy = field(default_factory=CachePolicy)
    transport_options: Mapping[str, Any] = field(default_factory=dict)

    def request(self, **kwargs: Any) -> "ApiRequest":
        """Start a new call of this type; see ``ApiRequest`` for arguments."""
        return ApiRequest(self, **kwargs)


class ApiRequest:
    """One call to an external API, mutable until it is sent.

    The URL is never stored: it is derived from the request state each time
    it is needed, so hooks may keep mutating arguments until the send.
    """

    def __init__(
        self,
        request_type: RequestType,
        arguments: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        method: HttpMethod | None = None,
        cache_tags: Iterable[str] | None = None,
        cache_policy: CachePolicy | None = None,
        transport_options: Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the request.

        Args:
            request_type: Integration this call belongs to.
            arguments: Key-value state the URL builder reads (path
                segments, query parameters).
            body: Body scratch-pad, interpreted only by the encoder.
            headers: Extra request headers.
            method: Override of the type's default method.
            cache_tags: Override of the type's default cache tags.
            cache_policy: Override of the type's default cache switches.
            transport_options: Merged over the type's transport options.
            context: Free-form state for hooks (entity ids, tokens).
        """
        self.request_type = request_type
        self.arguments: dict[str, Any] = dict(arguments or {})
        self.body: Any = body
        self.headers: dict[str, str] = dict(headers or {})
        self.method = method or request_type.method
        self.cache_tags: tuple[str, ...] = tuple(
            request_type.cache_tags if cache_tags is None else cache_tags
        )
        self.cache_policy = cache_policy or request_type.cache_policy
        self.transport_options: dict[str, Any] = {
            **request_type.transport_options,
            **(transport_options or {}),
        }
        self.context: dict[str, Any] = dict(context or {})
        self.sent_logs: list[str] = []
        self.last_run: PipelineRun | None = None

    def __repr__(self) -> str:
        return f"<ApiRequest {self.request_type.name} {self.method.value}>"

    @property
    def friendly_name(self) -> str:
        """Human-friendly name of the request type."""
        return friendly_name(self.request_type.name)

    @property
    def url(self) -> str:
        """URL derived from the current request state."""
        return self.request_type.url(self)

    @property
    def response_is_from_cache(self) -> bool:
        """Whether the latest run was served from cache."""
        return self.last_run is not None and self.last_run.from_cache

    def set_read_cache(self, setting: bool) -> "ApiRequest":
        """Fluent setter for the cache read switch."""
        self.cache_policy = self.cache_policy.model_copy(update={"read": setting})
        return self

    def set_write_cache(self, setting: bool) -> "ApiRequest":
        """Fluent setter for the cache write switch."""
        self.cache_policy = self.cache_policy.model_copy(update={"write": setting})
        return self

    def set_log(self, setting: bool) -> "ApiRequest":
        """Fluent setter for the logging switch."""
        self.cache_policy = self.cache_policy.model_copy(update={"log": setting})
        return self

    def set_body_kv(self, key: str, value: Any) -> None:
        """Set a value in a mapping body by dotted path.

        ``set_body_kv("customer.address.zip", "60601")`` creates the
        intermediate mappings as needed.
        """
        if self.body is None:
            self.body = {}
        target = self.body
        *parents, leaf = key.split(".")
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child
        target[leaf] = value

    def set_body_if_not_empty(self, key: str, value: Any) -> None:
        """Like ``set_body_kv``, skipping falsy values such as None or ""."""
        if value:
            self.set_body_kv(key, value)

    def encode_body(self) -> bytes | None:
        """Encode the body with the request type's encoder."""
        return self.request_type.encoder.encode(self)

    def prepare(self) -> PreparedRequest:
        """Snapshot the request as it would go on the wire.

        Content headers from the encoder and accept headers from the
        decoder take precedence over headers set on the request; names
        are compared case-insensitively so only one value is sent.
        """
        codec_headers = {
            **self.request_type.encoder.content_headers(),
            **self.request_type.decoder.accept_headers(),
        }
        overridden = {name.lower() for name in codec_headers}
        headers = {
            name: value
            for name, value in self.headers.items()
            if name.lower() not in overridden
        }
        headers.update(codec_headers)
        return PreparedRequest(
            method=self.method,
            url=self.url,
            headers=headers,
            body=self.encode_body(),
        )
