"""Cache-first retrieval of the current user's assigned Jira issues.

Error policy:
- fetcher failures propagate unchanged
- cache reads that fail propagate as :class:`CacheError`
- cache writes, and the delete at the start of a refresh, never fail the
  request; they are logged and reported on :class:`FetchOutcome`

A refresh deletes the cached entry before fetching. A concurrent ``fetch`` can
repopulate the entry in between; the refresh still returns its own fresh
result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from jira_agent_cache.agent.claude_fetcher import ClaudeMcpFetcher
from jira_agent_cache.agent.provider import IssueFetcher
from jira_agent_cache.cache.store import CacheEntry, CacheStoreError, TTLCacheStore
from jira_agent_cache.orchestrator.config import JiraSettings
from jira_agent_cache.orchestrator.errors import CacheError
from jira_agent_cache.orchestrator.models import JiraIssuesResponse

logger = logging.getLogger(__name__)

CACHE_KEY_MY_ISSUES = "my_issues"


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of a fetch or refresh.

    ``cache_error`` is set when the response was fetched successfully but could
    not be written to (or, for a refresh, removed from) the cache.
    """

    response: JiraIssuesResponse
    from_cache: bool
    cache_error: CacheStoreError | None = None

    @property
    def degraded(self) -> bool:
        return self.cache_error is not None


class JiraIssueService:
    """High-level, testable issue retrieval with a TTL cache in front."""

    def __init__(
        self,
        *,
        fetcher: IssueFetcher,
        store: TTLCacheStore,
        single_flight: bool = True,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._single_flight = single_flight
        self._inflight: dict[str, asyncio.Task[FetchOutcome]] = {}

    @classmethod
    def from_settings(cls, settings: JiraSettings) -> JiraIssueService:
        return cls(
            fetcher=ClaudeMcpFetcher.from_settings(settings),
            store=TTLCacheStore(settings.cache_db_path, ttl=settings.cache_ttl),
            single_flight=settings.single_flight,
        )

    @property
    def fetcher(self) -> IssueFetcher:
        return self._fetcher

    @property
    def store(self) -> TTLCacheStore:
        return self._store

    async def fetch(self) -> FetchOutcome:
        """Return cached issues when valid, otherwise fetch and cache them."""

        cached = await self._read_cache()
        if cached is not None:
            logger.info(
                "Returning cached Jira issues",
                extra={
                    "total": cached.data.total,
                    "ttl_remaining_seconds": cached.remaining_ttl_secs(),
                },
            )
            return FetchOutcome(response=cached.data, from_cache=True)

        logger.info("Cache miss - fetching Jira issues via Claude MCP")
        if not self._single_flight:
            return await self._fetch_and_store()

        task = self._inflight.get(CACHE_KEY_MY_ISSUES)
        if task is None:
            task = self._start_fetch()
        else:
            logger.debug("Joining in-flight Jira fetch")
        return await asyncio.shield(task)

    async def refresh(self) -> FetchOutcome:
        """Bypass the cache: drop the entry, fetch fresh issues, cache them."""

        logger.info("Force refreshing Jira issues via Claude MCP")

        invalidate_error: CacheStoreError | None = None
        try:
            await self._store.delete(CACHE_KEY_MY_ISSUES)
        except CacheStoreError as e:
            logger.warning("Failed to invalidate Jira cache", extra={"error": str(e)})
            invalidate_error = e

        if not self._single_flight:
            outcome = await self._fetch_and_store()
        else:
            # Never join a fetch that started before this refresh.
            outcome = await asyncio.shield(self._start_fetch())

        if invalidate_error is not None and outcome.cache_error is None:
            return FetchOutcome(
                response=outcome.response, from_cache=False, cache_error=invalidate_error
            )
        return outcome

    async def fetch_my_issues(self) -> JiraIssuesResponse:
        return (await self.fetch()).response

    async def refresh_my_issues(self) -> JiraIssuesResponse:
        return (await self.refresh()).response

    async def cleanup_expired_cache(self) -> int:
        try:
            return await self._store.cleanup_expired()
        except CacheStoreError as e:
            raise CacheError(e) from e

    async def invalidate_cache(self) -> int:
        try:
            removed = await self._store.invalidate_all()
        except CacheStoreError as e:
            raise CacheError(e) from e
        logger.info("Invalidated Jira cache", extra={"removed": removed})
        return removed

    async def _read_cache(self) -> CacheEntry[JiraIssuesResponse] | None:
        try:
            return await self._store.get(CACHE_KEY_MY_ISSUES, JiraIssuesResponse)
        except CacheStoreError as e:
            raise CacheError(e) from e

    def _start_fetch(self) -> asyncio.Task[FetchOutcome]:
        task = asyncio.ensure_future(self._fetch_and_store())
        self._inflight[CACHE_KEY_MY_ISSUES] = task

        def _forget(done: asyncio.Task[FetchOutcome]) -> None:
            if self._inflight.get(CACHE_KEY_MY_ISSUES) is done:
                del self._inflight[CACHE_KEY_MY_ISSUES]
            if not done.cancelled():
                # Mark the exception retrieved; awaiting callers re-raise it.
                done.exception()

        task.add_done_callback(_forget)
        return task

    async def _fetch_and_store(self) -> FetchOutcome:
        response = await self._fetcher.fetch_issues()

        try:
            await self._store.set(CACHE_KEY_MY_ISSUES, response)
        except CacheStoreError as e:
            logger.warning("Failed to cache Jira issues", extra={"error": str(e)})
            return FetchOutcome(response=response, from_cache=False, cache_error=e)

        return FetchOutcome(response=response, from_cache=False)
