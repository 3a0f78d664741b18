"""In-process tagged cache."""

import copy
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from src.cache.port import tag_namespace


logger = structlog.get_logger()


@dataclass
class _Entry:
    value: Any
    tags: frozenset[str]
    expires_at: datetime | None


class MemoryTaggedCache:
    """Dictionary-backed implementation of ``CachePort``.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store. Suitable for tests and single-process use.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize an empty cache.

        Args:
            clock: Source of the current time, defaults to UTC now.
        """
        self._entries: dict[tuple[str, str], _Entry] = {}
        self._clock = clock or (lambda: datetime.now(UTC))
        self._log = logger.bind(component="cache", backend="memory")

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, slot: tuple[str, str]) -> _Entry | None:
        entry = self._entries.get(slot)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del self._entries[slot]
            return None
        return entry

    async def get(self, key: str, tags: Iterable[str]) -> Any | None:
        entry = self._live_entry((tag_namespace(tags), key))
        return copy.deepcopy(entry.value) if entry is not None else None

    async def put(
        self,
        key: str,
        tags: Iterable[str],
        value: Any,
        expires_at: datetime | None,
    ) -> None:
        tag_set = frozenset(tags)
        self._entries[(tag_namespace(tag_set), key)] = _Entry(
            value=copy.deepcopy(value), tags=tag_set, expires_at=expires_at
        )
        self._log.debug("cache_put", key=key, tags=sorted(tag_set))

    async def forget(self, key: str, tags: Iterable[str]) -> bool:
        return self._entries.pop((tag_namespace(tags), key), None) is not None

    async def has(self, key: str, tags: Iterable[str]) -> bool:
        return self._live_entry((tag_namespace(tags), key)) is not None

    async def flush(self, tag: str) -> int:
        doomed = [slot for slot, entry in self._entries.items() if tag in entry.tags]
        for slot in doomed:
            del self._entries[slot]
        self._log.debug("cache_flush", tag=tag, removed=len(doomed))
        return len(doomed)
