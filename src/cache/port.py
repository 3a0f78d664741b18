"""Cache port: an opaque tagged key/value store."""

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol


class CachePort(Protocol):
    """Protocol for tagged cache storage operations.

    Entries are addressed by a key *within* a tag set: an entry written under
    tags ``{"a", "b"}`` is only visible to lookups made with that same tag
    set, and is dropped by ``flush`` of either tag. Implementations must at
    least provide atomic single-key get and put.
    """

    async def get(self, key: str, tags: Iterable[str]) -> Any | None:
        """Retrieve a stored value.

        Args:
            key: Entry key.
            tags: Tag set the entry was written under.

        Returns:
            Stored value, or None when absent or expired.
        """
        ...

    async def put(
        self,
        key: str,
        tags: Iterable[str],
        value: Any,
        expires_at: datetime | None,
    ) -> None:
        """Store a value.

        Args:
            key: Entry key.
            tags: Tag set to group the entry under.
            value: JSON-compatible value to store.
            expires_at: Expiry instant, None to keep until forgotten.
        """
        ...

    async def forget(self, key: str, tags: Iterable[str]) -> bool:
        """Remove a stored value.

        Args:
            key: Entry key.
            tags: Tag set the entry was written under.

        Returns:
            True if an entry was removed.
        """
        ...

    async def has(self, key: str, tags: Iterable[str]) -> bool:
        """Check whether a live entry exists.

        Args:
            key: Entry key.
            tags: Tag set the entry was written under.

        Returns:
            True if a non-expired entry exists.
        """
        ...

    async def flush(self, tag: str) -> int:
        """Remove every entry grouped under a tag.

        Args:
            tag: Tag to invalidate.

        Returns:
            Number of entries removed.
        """
        ...


def tag_namespace(tags: Iterable[str]) -> str:
    """Canonical namespace string for a tag set.

    Args:
        tags: Tags in any order, possibly repeated.

    Returns:
        Sorted, de-duplicated tags as a compact JSON array, so no tag
        content can make two different sets collide.
    """
    return json.dumps(sorted(set(tags)), separators=(",", ":"))
