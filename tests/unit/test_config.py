"""Unit tests for settings loading."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from jira_agent_cache.orchestrator.config import JiraSettings
from jira_agent_cache.server.config import ServerSettings

_ENV_VARS = (
    "CLAUDE_EXECUTABLE",
    "CLAUDE_MODEL",
    "JIRA_FETCH_TIMEOUT_SECONDS",
    "JIRA_CACHE_DB_PATH",
    "JIRA_CACHE_TTL_SECONDS",
    "JIRA_CACHE_CLEANUP_INTERVAL_SECONDS",
    "JIRA_SINGLE_FLIGHT",
    "LOG_LEVEL",
    "ORCHESTRATOR_CORS_ORIGINS",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_settings_defaults(clean_env: Path) -> None:
    settings = JiraSettings()

    assert settings.claude_executable == "claude"
    assert settings.claude_model == "haiku"
    assert settings.fetch_timeout_seconds == 30
    assert settings.cache_db_path == Path("agent_state") / "jira_cache.sqlite3"
    assert settings.cache_ttl == timedelta(minutes=5)
    assert settings.cache_cleanup_interval_seconds == 60.0
    assert settings.single_flight is True
    assert settings.log_level == "INFO"


def test_settings_loads_from_dotenv(clean_env: Path) -> None:
    (clean_env / ".env").write_text(
        "\n".join(
            [
                "CLAUDE_EXECUTABLE=/opt/claude/bin/claude",
                "JIRA_CACHE_TTL_SECONDS=0.25",
                "JIRA_SINGLE_FLIGHT=false",
                "LOG_LEVEL=DEBUG",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = JiraSettings()

    assert settings.claude_executable == "/opt/claude/bin/claude"
    assert settings.cache_ttl == timedelta(milliseconds=250)
    assert settings.single_flight is False
    assert settings.log_level == "DEBUG"


def test_environment_overrides_dotenv(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (clean_env / ".env").write_text("CLAUDE_MODEL=sonnet\n", encoding="utf-8")
    monkeypatch.setenv("CLAUDE_MODEL", "opus")

    assert JiraSettings().claude_model == "opus"


@pytest.mark.parametrize(
    "name,value",
    [
        ("JIRA_FETCH_TIMEOUT_SECONDS", "0"),
        ("JIRA_CACHE_TTL_SECONDS", "-1"),
        ("JIRA_CACHE_CLEANUP_INTERVAL_SECONDS", "-5"),
    ],
)
def test_settings_reject_out_of_range_values(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        JiraSettings()


def test_server_settings_parse_cors_origins(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORCHESTRATOR_CORS_ORIGINS", " http://a.test , ,http://b.test")

    settings = ServerSettings()

    assert settings.parsed_cors_origins() == ["http://a.test", "http://b.test"]
    assert settings.claude_executable == "claude"
