"""URL building for request types."""

from collections.abc import Mapping
from typing import Any

import httpx


def build_url(
    base_url: str,
    path: str,
    query_params: Mapping[str, Any] | None = None,
) -> str:
    """Build a URL to an external API.

    The path replaces whatever path ``base_url`` had; query parameters are
    appended in mapping order, so equal arguments give equal URLs.

    Args:
        base_url: Scheme and host, e.g. ``https://api.example.com``.
        path: Absolute path on that host.
        query_params: Optional query string values.

    Returns:
        The assembled URL.
    """
    url = httpx.URL(base_url).copy_with(path=path)
    if query_params:
        url = url.copy_merge_params(dict(query_params))
    return str(url)
