#!/usr/bin/env python3
"""Programmatic issue retrieval example.

This demonstrates using the service components directly:

* load settings from `.env`
* read assigned issues through the cache (or force a refresh)
* report whether the answer came from the cache

The Claude CLI must be installed and have the Atlassian MCP server configured.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Sequence

from jira_agent_cache.orchestrator.config import JiraSettings
from jira_agent_cache.orchestrator.errors import JiraError
from jira_agent_cache.orchestrator.issue_service import JiraIssueService
from jira_agent_cache.orchestrator.logging import configure_logging


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List assigned Jira issues (programmatic example).")
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cache and ask the Claude CLI again",
    )
    return parser.parse_args(argv)


async def _list_issues(service: JiraIssueService, *, refresh: bool) -> None:
    outcome = await (service.refresh() if refresh else service.fetch())

    source = "cache" if outcome.from_cache else "Claude CLI"
    print(f"{outcome.response.total} issue(s) from {source}:")
    for issue in outcome.response.issues:
        print(f"  {issue.key:<12} [{issue.status}] {issue.summary}")
        if issue.url:
            print(f"  {'':<12} {issue.url}")
    if outcome.degraded:
        print(f"Warning: response was not cached ({outcome.cache_error})")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = JiraSettings()
    configure_logging(settings.log_level)

    service = JiraIssueService.from_settings(settings)

    try:
        asyncio.run(_list_issues(service, refresh=args.refresh))
    except JiraError as exc:
        print(f"{exc.code}: {exc.details}")
        return 1

    print(f"Cache: {settings.cache_db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
