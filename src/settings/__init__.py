"""Application settings loading."""

from .app import DEFAULT_CACHE_KEY_SEED, ApiRequestSettings, get_settings


__all__ = ["DEFAULT_CACHE_KEY_SEED", "ApiRequestSettings", "get_settings"]
