"""Issue fetchers.

Classes:
    IssueFetcher: Abstract base class for all fetchers
    ClaudeMcpFetcher: Fetcher using the Claude CLI's Atlassian MCP integration
"""

from jira_agent_cache.agent.claude_fetcher import (
    DEFAULT_TIMEOUT_SECONDS,
    MY_ISSUES_PROMPT,
    ClaudeMcpFetcher,
)
from jira_agent_cache.agent.provider import IssueFetcher

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "MY_ISSUES_PROMPT",
    "ClaudeMcpFetcher",
    "IssueFetcher",
]
