"""Configuration for the REST server.

The server starts even if the Claude CLI is not installed; the Jira endpoints
then answer with ``NOT_CONFIGURED`` at request time.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from jira_agent_cache.orchestrator.config import JiraSettings


class ServerSettings(JiraSettings):
    """Settings for the REST API, on top of :class:`JiraSettings`."""

    # Dev-friendly CORS (Vite). Override via ORCHESTRATOR_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="ORCHESTRATOR_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", extra="ignore", populate_by_name=True
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
