"""SQLite-backed TTL cache for serialized responses.

Rows live in a single ``jira_cache`` table keyed by ``cache_key``. Validity is
computed on read from ``cached_at`` and the store's TTL; it is never stored.

Expired rows are removed in two complementary ways:
- lazily, when :meth:`TTLCacheStore.get` finds one
- in bulk, via :meth:`TTLCacheStore.cleanup_expired`

``get`` reads and then deletes in two statements. Two readers racing on the
same expired key both issue the delete; the second one is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Generic, TypeVar

import aiosqlite
from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = timedelta(minutes=5)

# SQLite writes "2024-01-17 12:34:56.789"; accept the ISO "T" separator too.
_TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
)

_WRITE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS jira_cache (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        cache_key   TEXT NOT NULL UNIQUE,
        data        TEXT NOT NULL,
        cached_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_jira_cache_cache_key ON jira_cache(cache_key)",
    "CREATE INDEX IF NOT EXISTS idx_jira_cache_cached_at ON jira_cache(cached_at)",
)


class CacheStoreError(Exception):
    """Base class for cache store failures."""


class CacheDatabaseError(CacheStoreError):
    """The storage engine failed."""

    def __str__(self) -> str:
        return f"Database error: {self.args[0] if self.args else ''}"


class CacheSerializationError(CacheStoreError):
    """A payload could not be serialized, or a stored payload could not be parsed."""

    def __str__(self) -> str:
        return f"JSON serialization error: {self.args[0] if self.args else ''}"


class CacheTimestampError(CacheStoreError):
    """A stored ``cached_at`` value matched none of the accepted formats."""

    def __str__(self) -> str:
        return f"Parse error: {self.args[0] if self.args else ''}"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def parse_cached_at(value: str) -> datetime:
    """Parse a stored ``cached_at`` string into an aware UTC datetime.

    Formats are tried in order; the first match wins.

    Raises:
        CacheTimestampError: If no accepted format matches.
    """

    for fmt in _TIMESTAMP_FORMATS:
        try:
            naive = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return naive.replace(tzinfo=UTC)
    raise CacheTimestampError(f"Failed to parse datetime: {value}")


def format_cached_at(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime(_WRITE_FORMAT)


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached payload together with the time it was written."""

    cache_key: str
    data: T
    cached_at: datetime
    ttl: timedelta = DEFAULT_TTL

    @property
    def expires_at(self) -> datetime:
        return self.cached_at + self.ttl

    def is_valid(self, now: datetime | None = None) -> bool:
        """Return True while the entry is within its TTL."""

        return (now or _utc_now()) < self.expires_at

    def remaining_ttl_secs(self, now: datetime | None = None) -> int:
        """Whole seconds until expiry, never negative."""

        remaining = self.expires_at - (now or _utc_now())
        return max(int(remaining.total_seconds()), 0)


class TTLCacheStore:
    """Async key/value store with a single, fixed TTL.

    Args:
        path: SQLite database file. Parent directories are created on first use.
        ttl: How long an entry stays valid after its last write.
        clock: Returns the current time as an aware UTC datetime. Tests inject
            their own to move time without sleeping.
        busy_timeout: Seconds SQLite waits on a locked database before failing.
    """

    def __init__(
        self,
        path: Path,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utc_now,
        busy_timeout: float = 5.0,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Cache TTL must be positive")
        self._path = path
        self._ttl = ttl
        self._clock = clock
        self._busy_timeout = busy_timeout
        self._schema_ready = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            if not self._schema_ready:
                self._path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(self._path, timeout=self._busy_timeout) as db:
                if not self._schema_ready:
                    await db.execute("PRAGMA journal_mode=WAL")
                    for statement in _SCHEMA:
                        await db.execute(statement)
                    await db.commit()
                    self._schema_ready = True
                yield db
        except (aiosqlite.Error, OSError) as e:
            raise CacheDatabaseError(str(e)) from e

    async def initialize(self) -> None:
        """Create the table and indexes if they do not exist yet."""

        async with self._connect():
            pass

    async def get(self, cache_key: str, payload_type: type[T]) -> CacheEntry[T] | None:
        """Return the entry for ``cache_key`` if present and still valid.

        An expired entry is deleted before returning None.

        Raises:
            CacheSerializationError: The stored payload does not parse as ``payload_type``.
            CacheTimestampError: The stored ``cached_at`` is not in an accepted format.
            CacheDatabaseError: The storage engine failed.
        """

        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT cache_key, data, cached_at FROM jira_cache WHERE cache_key = ?",
                (cache_key,),
            )
            row = await cursor.fetchone()
            await cursor.close()

        if row is None:
            return None

        key, raw_data, raw_cached_at = row
        try:
            data = TypeAdapter(payload_type).validate_json(raw_data)
        except ValidationError as e:
            raise CacheSerializationError(str(e)) from e

        entry = CacheEntry(
            cache_key=key,
            data=data,
            cached_at=parse_cached_at(raw_cached_at),
            ttl=self._ttl,
        )
        if entry.is_valid(self._clock()):
            return entry

        logger.debug("Cache entry expired; deleting", extra={"cache_key": cache_key})
        await self.delete(cache_key)
        return None

    async def set(self, cache_key: str, data: Any) -> None:
        """Insert or overwrite ``cache_key``, refreshing ``cached_at`` to now."""

        try:
            serialized = TypeAdapter(type(data)).dump_json(data).decode("utf-8")
        except (PydanticSchemaGenerationError, PydanticSerializationError) as e:
            raise CacheSerializationError(str(e)) from e

        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO jira_cache (cache_key, data, cached_at)
                VALUES (?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    data = excluded.data,
                    cached_at = excluded.cached_at
                """,
                (cache_key, serialized, format_cached_at(self._clock())),
            )
            await db.commit()

    async def delete(self, cache_key: str) -> int:
        """Delete one entry; returns the number of rows removed (0 or 1)."""

        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM jira_cache WHERE cache_key = ?", (cache_key,))
            await db.commit()
            return cursor.rowcount

    async def cleanup_expired(self) -> int:
        """Delete every entry older than the TTL, read or not."""

        cutoff = format_cached_at(self._clock() - self._ttl)
        async with self._connect() as db:
            # julianday() accepts both the space and "T" separators.
            cursor = await db.execute(
                "DELETE FROM jira_cache WHERE julianday(cached_at) < julianday(?)",
                (cutoff,),
            )
            await db.commit()
            removed = cursor.rowcount

        if removed:
            logger.info("Removed expired cache entries", extra={"removed": removed})
        return removed

    async def invalidate_all(self) -> int:
        """Delete every entry regardless of age."""

        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM jira_cache")
            await db.commit()
            return cursor.rowcount

    async def count(self) -> int:
        """Number of rows currently stored, expired or not."""

        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM jira_cache")
            row = await cursor.fetchone()
            await cursor.close()
        return int(row[0]) if row else 0
