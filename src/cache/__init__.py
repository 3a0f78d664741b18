"""Response cache: fingerprint derivation and tagged key/value stores.

The pipeline owns the policy (when to read, when to write, how long to
keep); the stores here are opaque tagged key/value backends.
"""

from src.cache.errors import CacheConnectionError, CacheStoreError
from src.cache.fingerprint import compute_fingerprint
from src.cache.memory import MemoryTaggedCache
from src.cache.port import CachePort, tag_namespace
from src.cache.sqlite import SqliteTaggedCache


__all__ = [
    "CacheConnectionError",
    "CachePort",
    "CacheStoreError",
    "MemoryTaggedCache",
    "SqliteTaggedCache",
    "compute_fingerprint",
    "tag_namespace",
]
