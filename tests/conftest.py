"""Test configuration and fixtures."""

from __future__ import annotations

import stat
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from jira_agent_cache.cache.store import TTLCacheStore
from jira_agent_cache.orchestrator.config import JiraSettings


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock pinned near the real current time."""
    return FakeClock(datetime.now(tz=UTC).replace(microsecond=0))


@pytest.fixture
def cache_db(tmp_path: Path) -> Path:
    """Provide a path for a throwaway SQLite cache database."""
    return tmp_path / "agent_state" / "jira_cache.sqlite3"


@pytest.fixture
def store(cache_db: Path, clock: FakeClock) -> TTLCacheStore:
    """Provide a cache store with the default 5 minute TTL and a fake clock."""
    return TTLCacheStore(cache_db, clock=clock)


@pytest.fixture
def settings(cache_db: Path) -> JiraSettings:
    """Provide settings isolated from the environment and any `.env` file."""
    return JiraSettings(
        _env_file=None,
        cache_db_path=cache_db,
        cache_cleanup_interval_seconds=0,
    )


@pytest.fixture
def make_cli(tmp_path: Path) -> Callable[[str], Path]:
    """Write an executable shell script standing in for the Claude CLI."""

    def _make(body: str) -> Path:
        script = tmp_path / "bin" / "fake-claude"
        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
