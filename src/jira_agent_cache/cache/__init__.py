"""Persistent TTL cache."""

from jira_agent_cache.cache.store import (
    DEFAULT_TTL,
    CacheDatabaseError,
    CacheEntry,
    CacheSerializationError,
    CacheStoreError,
    CacheTimestampError,
    TTLCacheStore,
)

__all__ = [
    "DEFAULT_TTL",
    "CacheDatabaseError",
    "CacheEntry",
    "CacheSerializationError",
    "CacheStoreError",
    "CacheTimestampError",
    "TTLCacheStore",
]
