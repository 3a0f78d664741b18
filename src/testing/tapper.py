"""Declarative HTTP responses for tests.

Register a method, a URL regex and a behavior; the code under test sends
requests as usual through an ``httpx.MockTransport`` built by the tapper.
Matches are checked in registration order and the *first* match wins, so
tests don't depend on the order the code sends its requests in.

Example:
    tapper = HttpTapper()
    tapper.add_match_body("GET", r"/widgets/42$", '{"id": 42}')
    transport = HttpxTransport(transport=tapper.build_transport())
"""

import re
from collections.abc import Callable
from pathlib import Path

import httpx
import structlog

from src.settings import ApiRequestSettings


logger = structlog.get_logger()

Behavior = httpx.Response | Exception | Callable[[httpx.Request], "httpx.Response | Exception"]


def _fresh(response: httpx.Response) -> httpx.Response:
    # httpx binds a response to the request it answers, so registered
    # responses are copied rather than handed out twice.
    return httpx.Response(
        response.status_code,
        headers=response.headers,
        content=response.content,
    )


class UnmatchedRequestError(LookupError):
    """Raised when a request matches no registered behavior."""


class HttpTapper:
    """Method + URL pattern matcher feeding ``httpx.MockTransport``.

    A behavior is one of:
        - ``httpx.Response``: returned as-is
        - ``Exception``: raised, e.g. ``httpx.ConnectTimeout``
        - callable: receives the ``httpx.Request`` and returns either of the
          above, so it can assert on the request body before answering
    """

    def __init__(self, settings: ApiRequestSettings | None = None) -> None:
        """Initialize the tapper.

        Args:
            settings: Supplies ``tapper_data_path`` for ``add_match_file``.
        """
        self._settings = settings or ApiRequestSettings()
        self._matches: dict[str, dict[str, Behavior]] = {}
        self._calls: list[httpx.Request] = []
        self._log = logger.bind(component="tapper")

    @property
    def calls(self) -> list[httpx.Request]:
        """Get every matched request, in the order it was received."""
        return list(self._calls)

    def add_match(self, method: str, url_pattern: str, behavior: Behavior) -> "HttpTapper":
        """Register a behavior for a method and URL regex.

        Re-registering the same method and pattern replaces the behavior
        but keeps its original position.
        """
        self._matches.setdefault(method.upper(), {})[url_pattern] = behavior
        return self

    def add_match_body(
        self,
        method: str,
        url_pattern: str,
        body: str,
        status: int = 200,
    ) -> "HttpTapper":
        """Register a canned body. Anything longer than a line belongs in a data file."""
        return self.add_match(method, url_pattern, httpx.Response(status, text=body))

    def add_match_file(
        self,
        method: str,
        url_pattern: str,
        filename: str,
        status: int = 200,
    ) -> "HttpTapper":
        """Register the contents of a file under ``tapper_data_path``."""
        path = Path(self._settings.tapper_data_path) / filename
        return self.add_match(
            method, url_pattern, httpx.Response(status, content=path.read_bytes())
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        """Answer a request with the first matching behavior.

        Raises:
            UnmatchedRequestError: If nothing matches the method and URL.
            Exception: Whatever exception the matched behavior provides.
        """
        method = request.method
        url = str(request.url)
        patterns = self._matches.get(method)
        if not patterns:
            raise UnmatchedRequestError(f"No responses match method {method}")

        for pattern, behavior in patterns.items():
            if not re.search(pattern, url):
                continue
            self._calls.append(request)
            self._log.debug("tapper_matched", method=method, url=url, pattern=pattern)
            if callable(behavior):
                behavior = behavior(request)
            if isinstance(behavior, Exception):
                raise behavior
            return _fresh(behavior)

        raise UnmatchedRequestError(f"No {method} responses match URL {url}")

    def build_transport(self) -> httpx.MockTransport:
        """Build a mock transport answering through this tapper."""
        return httpx.MockTransport(self.handler)

    def get_count(self, method: str, exact_url: str) -> int:
        """Number of calls to exactly this method and URL."""
        return sum(
            1
            for call in self._calls
            if call.method == method.upper() and str(call.url) == exact_url
        )

    def get_count_like(self, method: str, url_pattern: str) -> int:
        """Number of calls with this method and a URL matching the regex."""
        return sum(
            1
            for call in self._calls
            if call.method == method.upper() and re.search(url_pattern, str(call.url))
        )

    def get_count_all(self) -> int:
        """Number of calls across all methods; handy for "nothing sent yet"."""
        return len(self._calls)
