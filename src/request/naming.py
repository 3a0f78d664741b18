"""Human-friendly names for request types, used in error messages."""

import re


_NON_LETTERS = re.compile(r"[^a-z]+", re.IGNORECASE)
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def friendly_name(name: str) -> str:
    """Turn a dotted or camel-cased identifier into separated words.

    ``"integrations.WidgetLookup_v2"`` becomes ``"Widget Lookup v"``.

    Args:
        name: Request type name, possibly with a module prefix.

    Returns:
        Words separated by single spaces.
    """
    base = name.rsplit(".", 1)[-1]
    spaced = _NON_LETTERS.sub(" ", base)
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", spaced)
    return spaced.strip() or "Anonymous Request"
