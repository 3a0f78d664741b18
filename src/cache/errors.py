"""Exceptions for cache store adapters.

Cache faults are infrastructure failures: the request pipeline does not
intercept them, they propagate to the caller as-is.
"""


class CacheStoreError(Exception):
    """Base exception for all cache store errors."""


class CacheConnectionError(CacheStoreError):
    """Raised when the backing database is not connected."""

    def __init__(self, message: str = "Cache store not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
