"""Configuration for the Jira issue fetcher.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing here is required at startup. Whether the Claude CLI is actually
available is checked when issues are fetched, and reported as
``NOT_CONFIGURED`` rather than failing settings validation.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JiraSettings(BaseSettings):
    """Settings for fetching and caching assigned Jira issues.

    Environment variables:
    - CLAUDE_EXECUTABLE                   (optional)
    - CLAUDE_MODEL                        (optional)
    - JIRA_FETCH_TIMEOUT_SECONDS          (optional)
    - JIRA_CACHE_DB_PATH                  (optional)
    - JIRA_CACHE_TTL_SECONDS              (optional)
    - JIRA_CACHE_CLEANUP_INTERVAL_SECONDS (optional)
    - JIRA_SINGLE_FLIGHT                  (optional)
    - LOG_LEVEL                           (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `JiraSettings(_env_file=path_to_env)`.
    """

    claude_executable: str = Field(
        default="claude",
        validation_alias="CLAUDE_EXECUTABLE",
        description="Name or path of the Claude CLI executable",
    )
    claude_model: str = Field(
        default="haiku",
        validation_alias="CLAUDE_MODEL",
        description="Model passed to the CLI; a fast model keeps the round trip short",
    )
    fetch_timeout_seconds: int = Field(
        default=30,
        gt=0,
        validation_alias="JIRA_FETCH_TIMEOUT_SECONDS",
        description="Wall-clock limit for a single CLI invocation",
    )

    cache_db_path: Path = Field(
        default=Path("agent_state") / "jira_cache.sqlite3",
        validation_alias="JIRA_CACHE_DB_PATH",
        description="SQLite database file holding the response cache",
    )
    cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        validation_alias="JIRA_CACHE_TTL_SECONDS",
        description="How long a cached response stays valid",
    )
    cache_cleanup_interval_seconds: float = Field(
        default=60.0,
        ge=0,
        validation_alias="JIRA_CACHE_CLEANUP_INTERVAL_SECONDS",
        description="Interval for the server's expired-row sweep. Set to 0 to disable.",
    )

    single_flight: bool = Field(
        default=True,
        validation_alias="JIRA_SINGLE_FLIGHT",
        description=(
            "If true, concurrent cache misses share one CLI invocation instead of "
            "each starting their own."
        ),
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def cache_ttl(self) -> timedelta:
        """Cache TTL as a timedelta, as the cache store expects it."""

        return timedelta(seconds=self.cache_ttl_seconds)
