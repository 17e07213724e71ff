"""Errors raised while fetching assigned Jira issues.

The set is closed: every failure surfaced by
:class:`~jira_agent_cache.orchestrator.issue_service.JiraIssueService` is one of
the classes below, and each maps to a stable machine-readable ``code``.
"""

from __future__ import annotations

from typing import ClassVar

from jira_agent_cache.cache.store import CacheStoreError

# Excerpts of offending agent output are capped at this many characters.
MAX_EXCERPT_CHARS = 500


def excerpt(text: str, limit: int = MAX_EXCERPT_CHARS) -> str:
    return text[:limit]


class JiraError(Exception):
    """Base class; ``details`` is the human-readable part shown to users."""

    code: ClassVar[str] = "UNKNOWN"
    prefix: ClassVar[str] = ""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details

    def __str__(self) -> str:
        return f"{self.prefix}{self.details}"


class NotConfigured(JiraError):
    """The Claude CLI (and with it the Atlassian MCP server) is unavailable."""

    code = "NOT_CONFIGURED"
    prefix = "Claude MCP not configured: "


class ExecutionError(JiraError):
    """The CLI could not be launched or exited non-zero."""

    code = "EXECUTION_ERROR"
    prefix = "Failed to execute Claude CLI: "


class ParseError(JiraError):
    code = "PARSE_ERROR"
    prefix = "Failed to parse response: "


class ClaudeError(JiraError):
    """The CLI reported its own failure; ``details`` is its message, unchanged."""

    code = "CLAUDE_ERROR"
    prefix = "Claude returned an error: "


class FetchTimeout(JiraError):
    code = "TIMEOUT"

    def __init__(self, seconds: int) -> None:
        super().__init__(f"Request timed out after {seconds} seconds. Please try again.")
        self.seconds = seconds

    def __str__(self) -> str:
        return f"Request timed out after {self.seconds} seconds"


class CacheError(JiraError):
    """A cache read or invalidation failed."""

    code = "CACHE_ERROR"

    def __init__(self, inner: CacheStoreError) -> None:
        super().__init__(f"Cache error: {inner}")
        self.inner = inner

    def __str__(self) -> str:
        return self.details
