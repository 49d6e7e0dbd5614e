"""SQLite-backed cache shared by the artwork providers.

Entries live in named namespaces ("logo", "fanartApiKey", ...) and carry
their own expiry. Values are stored as JSON, so `None` is a legitimate
cached value; a miss is reported as no entry at all.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosqlite

from artwork_aggregator.cache.migrations import ensure_connection_migrated
from artwork_aggregator.cache.paths import resolve_cache_db_path


@dataclass(frozen=True)
class CacheEntry:
    """A live cache entry. `value` may be None ("confirmed nothing")."""

    key: str
    value: Any
    expires_at: float


class ProviderCache:
    """Async SQLite key/value cache with per-entry TTL."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        default_ttl: int = 3600,
    ) -> None:
        """Initialize the cache.

        Args:
            db_path: Path to SQLite database file (\":memory:\" for in-memory). When
                omitted, resolves to `ARTWORK_CACHE_PATH` or `./.cache/artwork.db`.
            default_ttl: Default TTL in seconds (default: 1 hour).
        """

        self.default_ttl = default_ttl
        self._db_path = resolve_cache_db_path(db_path)
        self._db: aiosqlite.Connection | None = None
        self._connect_lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def _get_connection(self) -> aiosqlite.Connection:
        # Concurrent first callers must share one connection.
        async with self._connect_lock:
            if self._db is None:
                connection = await aiosqlite.connect(self._db_path)
                await ensure_connection_migrated(connection)
                self._db = connection
        return self._db

    @staticmethod
    def make_key(namespace: str, params: dict[str, Any]) -> str:
        """Derive an opaque, stable key from structured params.

        Used for keys that must not be stored verbatim (API keys).
        """

        sorted_params = json.dumps(params, sort_keys=True)
        return hashlib.sha256(f"{namespace}:{sorted_params}".encode()).hexdigest()

    async def get(self, namespace: str, key: str) -> CacheEntry | None:
        """Return the live entry for `key`, or None on a miss or expiry."""

        db = await self._get_connection()

        async with db.execute(
            """
            SELECT data, expires_at FROM cache_entries
            WHERE namespace = ? AND cache_key = ? AND expires_at > ?
            """,
            (namespace, key, time.time()),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            self._misses += 1
            return None

        self._hits += 1
        return CacheEntry(key=key, value=json.loads(row[0]), expires_at=row[1])

    async def set(
        self,
        namespace: str,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Store a JSON-serialisable value (None included) with a TTL."""

        db = await self._get_connection()
        ttl_seconds = ttl if ttl is not None else self.default_ttl
        now = time.time()

        await db.execute(
            """
            INSERT OR REPLACE INTO cache_entries
            (namespace, cache_key, data, expires_at, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (namespace, key, json.dumps(value), now + ttl_seconds, now),
        )
        await db.commit()

    async def clear(self, namespace: str | None = None) -> int:
        """Delete all entries, or only those of one namespace.

        Returns:
            Number of rows removed
        """

        db = await self._get_connection()
        if namespace is None:
            cursor = await db.execute("DELETE FROM cache_entries")
        else:
            cursor = await db.execute(
                "DELETE FROM cache_entries WHERE namespace = ?", (namespace,)
            )
        await db.commit()
        return cursor.rowcount

    async def cleanup_expired(self) -> int:
        """Remove expired entries and return how many were dropped."""

        db = await self._get_connection()
        cursor = await db.execute(
            "DELETE FROM cache_entries WHERE expires_at <= ?", (time.time(),)
        )
        await db.commit()
        return cursor.rowcount

    def get_stats(self) -> dict[str, int | float]:
        """Hit/miss counters for this handle."""

        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": total,
            "hit_rate": round(hit_rate, 2),
        }

    async def close(self) -> None:
        """Close the database connection."""

        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> ProviderCache:
        await self._get_connection()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
