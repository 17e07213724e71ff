"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the issue service.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jira_agent_cache import __version__
from jira_agent_cache.orchestrator.issue_service import JiraIssueService
from jira_agent_cache.server.config import ServerSettings
from jira_agent_cache.server.jira_router import router as jira_router

logger = logging.getLogger(__name__)


async def _sweep_expired(service: JiraIssueService, interval_seconds: float) -> None:
    """Periodically remove expired cache rows that are never read again."""

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await service.cleanup_expired_cache()
        except Exception:
            logger.exception("Expired cache sweep failed")


def create_app(
    settings: ServerSettings | None = None,
    service: JiraIssueService | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()
    service = service or JiraIssueService.from_settings(settings)

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        sweeper: asyncio.Task[None] | None = None
        if settings.cache_cleanup_interval_seconds > 0:
            sweeper = asyncio.create_task(
                _sweep_expired(service, settings.cache_cleanup_interval_seconds),
                name="jira-cache-sweeper",
            )
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper

    app = FastAPI(
        title="Jira Agent Cache",
        version=__version__,
        description="REST API for assigned Jira issues fetched via the Claude CLI.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Expose settings and the service for request handlers.
    app.state.settings = settings
    app.state.jira_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    app.include_router(jira_router, prefix="/api")
    return app
