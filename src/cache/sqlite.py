"""SQLite-backed tagged cache."""

import asyncio
import json
import sqlite3
import threading
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from src.cache.errors import CacheConnectionError
from src.cache.port import tag_namespace


logger = structlog.get_logger()

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cache_entries (
    namespace TEXT NOT NULL,
    cache_key TEXT NOT NULL,
    value TEXT NOT NULL,
    expires_at TEXT,
    PRIMARY KEY (namespace, cache_key)
);
CREATE TABLE IF NOT EXISTS cache_entry_tags (
    tag TEXT NOT NULL,
    namespace TEXT NOT NULL,
    cache_key TEXT NOT NULL,
    PRIMARY KEY (tag, namespace, cache_key),
    FOREIGN KEY (namespace, cache_key)
        REFERENCES cache_entries (namespace, cache_key) ON DELETE CASCADE
);
"""


class SqliteTaggedCache:
    """Persistent implementation of ``CachePort`` on a SQLite file.

    Values are stored as JSON text, so cache tuples come back as lists.
    Expired entries are treated as absent and deleted lazily on read.
    One connection is shared by worker threads; a lock serializes queries.
    """

    def __init__(
        self,
        db_path: Path | str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the cache store.

        Args:
            db_path: Path to SQLite database file (``:memory:`` allowed).
            clock: Source of the current time, defaults to UTC now.
        """
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._log = logger.bind(
            component="cache", backend="sqlite", db_path=self._db_path
        )

    @property
    def is_connected(self) -> bool:
        """Whether ``connect()`` has opened the file."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the cache file and create its tables.

        Missing parent folders are created. Calling twice is a no-op.
        """
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(SCHEMA_SQL)
        self._log.info("cache_store_connected")

    def close(self) -> None:
        """Release the connection; the file stays on disk."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        self._log.info("cache_store_closed")

    def __enter__(self) -> "SqliteTaggedCache":
        """Connect on entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Close on exit, also after errors."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._conn is None:
            raise CacheConnectionError("Cache store not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self) -> Generator[sqlite3.Connection]:
        with self._lock:
            conn = self._ensure_connected()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def _is_expired(self, expires_at: str | None) -> bool:
        if expires_at is None:
            return False
        return datetime.fromisoformat(expires_at) <= self._clock()

    def _get_blocking(self, key: str, namespace: str) -> Any | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM cache_entries "
                "WHERE namespace = ? AND cache_key = ?",
                (namespace, key),
            ).fetchone()
            if row is None:
                return None
            value, expires_at = row
            if self._is_expired(expires_at):
                conn.execute(
                    "DELETE FROM cache_entries WHERE namespace = ? AND cache_key = ?",
                    (namespace, key),
                )
                return None
        return json.loads(value)

    def _put_blocking(
        self,
        key: str,
        tag_set: list[str],
        encoded: str,
        expires_at: datetime | None,
    ) -> None:
        namespace = tag_namespace(tag_set)
        with self._transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO cache_entries "
                "(namespace, cache_key, value, expires_at) VALUES (?, ?, ?, ?)",
                (
                    namespace,
                    key,
                    encoded,
                    expires_at.isoformat() if expires_at is not None else None,
                ),
            )
            conn.executemany(
                "INSERT OR IGNORE INTO cache_entry_tags (tag, namespace, cache_key) "
                "VALUES (?, ?, ?)",
                [(tag, namespace, key) for tag in tag_set],
            )

    def _delete_blocking(self, sql: str, params: tuple[str, ...]) -> int:
        with self._transaction() as conn:
            return conn.execute(sql, params).rowcount

    # Queries run on a worker thread so cache reads and writes suspend the
    # calling task instead of blocking the event loop.

    async def get(self, key: str, tags: Iterable[str]) -> Any | None:
        return await asyncio.to_thread(self._get_blocking, key, tag_namespace(tags))

    async def put(
        self,
        key: str,
        tags: Iterable[str],
        value: Any,
        expires_at: datetime | None,
    ) -> None:
        tag_set = sorted(set(tags))
        # Encoded before the thread hop; later mutation of value cannot reach the store
        encoded = json.dumps(value)
        await asyncio.to_thread(self._put_blocking, key, tag_set, encoded, expires_at)
        self._log.debug("cache_put", key=key, tags=tag_set)

    async def forget(self, key: str, tags: Iterable[str]) -> bool:
        removed = await asyncio.to_thread(
            self._delete_blocking,
            "DELETE FROM cache_entries WHERE namespace = ? AND cache_key = ?",
            (tag_namespace(tags), key),
        )
        return removed > 0

    async def has(self, key: str, tags: Iterable[str]) -> bool:
        return await self.get(key, tags) is not None

    async def flush(self, tag: str) -> int:
        removed = await asyncio.to_thread(
            self._delete_blocking,
            """
            DELETE FROM cache_entries
            WHERE (namespace, cache_key) IN (
                SELECT namespace, cache_key FROM cache_entry_tags WHERE tag = ?
            )
            """,
            (tag,),
        )
        self._log.debug("cache_flush", tag=tag, removed=removed)
        return removed
