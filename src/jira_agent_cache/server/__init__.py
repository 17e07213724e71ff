"""FastAPI server adapter for jira-agent-cache.

Design intent:
- Keep fetch and cache logic in `jira_agent_cache.orchestrator.*`
- Keep server-specific concerns (routing, CORS, the periodic sweep) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from jira_agent_cache.server.app import create_app
