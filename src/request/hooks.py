"""Lifecycle hooks a request type can customize.

Integrations subclass ``RequestHooks`` and override only what they need;
every hook has a documented default:

- ``prerequisites``: no-op
- ``post_process``: passthrough
- ``otherwise``: re-raise the failure
- ``log_folder``: *required* while logging is enabled
- ``cache_expires_at``: one day after the write
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import structlog

from src.errors import NotImplementedHookError


if TYPE_CHECKING:
    from src.request.descriptor import ApiRequest


logger = structlog.get_logger()

DEFAULT_CACHE_TTL = timedelta(days=1)


class RequestHooks:
    """Default hook implementations for a request type.

    ``post_process`` and ``otherwise`` may be plain or ``async`` methods.
    """

    async def prerequisites(self, request: "ApiRequest") -> None:
        """Slow preparation that must finish before the request proceeds.

        May mutate the request (fetch a token, fill in a default); runs
        before the fingerprint is computed.
        """
        return None

    def post_process(self, request: "ApiRequest", parsed: Any) -> Any:
        """Turn the decoded response into what the application wants."""
        return parsed

    def otherwise(self, request: "ApiRequest", error: Exception) -> Any:
        """Last chance to handle a failure from any stage.

        Return a value to turn the run into a success, or raise (the same
        or a more specific error) to keep it rejected.
        """
        raise error

    def log_folder(self, request: "ApiRequest") -> str:
        """Folder for this request's log artifacts.

        Typically incorporates local state such as an entity id.

        Raises:
            NotImplementedHookError: Unless overridden.
        """
        raise NotImplementedHookError(
            f"To enable request logging, {request.friendly_name} will have to "
            "implement the log_folder hook"
        )

    def cache_expires_at(
        self, request: "ApiRequest", now: datetime
    ) -> datetime | None:
        """When a freshly written cache entry should expire.

        Override for response-dependent expiry; return None to keep the
        entry until purged. Hooks defining the legacy ``expires`` attribute
        (minutes) are still honoured, with a deprecation warning.
        """
        legacy_minutes = getattr(self, "expires", None)
        if legacy_minutes is not None:
            logger.warning(
                "deprecated_expires_attribute",
                hooks=type(self).__name__,
                request_type=request.request_type.name,
                hint="override cache_expires_at instead",
            )
            return now + timedelta(minutes=legacy_minutes)
        return now + DEFAULT_CACHE_TTL
