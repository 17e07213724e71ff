"""Jira Agent Cache.

Fetches the current user's assigned Jira issues through the Claude CLI's
Atlassian MCP integration, with:
- configuration loaded from `.env`
- structured logging
- a SQLite-backed response cache with a fixed TTL
"""

__version__ = "0.1.0"

from jira_agent_cache.orchestrator.config import JiraSettings

__all__ = ["__version__", "JiraSettings"]
