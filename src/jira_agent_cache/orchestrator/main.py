"""CLI entrypoint for fetching and caching assigned Jira issues."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from jira_agent_cache import __version__
from jira_agent_cache.orchestrator.config import JiraSettings
from jira_agent_cache.orchestrator.errors import JiraError
from jira_agent_cache.orchestrator.issue_service import JiraIssueService
from jira_agent_cache.orchestrator.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-agent-cache",
        description="Fetch your assigned Jira issues via the Claude CLI, with a TTL cache",
    )
    parser.add_argument("--version", action="version", version=f"jira-agent-cache {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    my_issues = subparsers.add_parser(
        "my-issues", help="Print assigned issues (served from cache when valid)"
    )
    refresh = subparsers.add_parser("refresh", help="Bypass the cache and fetch fresh issues")
    for sub in (my_issues, refresh):
        sub.add_argument(
            "--indent",
            type=int,
            default=2,
            help="JSON indentation for the printed response",
        )

    subparsers.add_parser("cleanup-cache", help="Delete expired cache entries")
    subparsers.add_parser("invalidate-cache", help="Delete every cache entry")

    return parser


async def _run(args: argparse.Namespace, service: JiraIssueService) -> int:
    if args.command == "my-issues":
        response = await service.fetch_my_issues()
        print(response.model_dump_json(indent=args.indent))
        return 0

    if args.command == "refresh":
        response = await service.refresh_my_issues()
        print(response.model_dump_json(indent=args.indent))
        return 0

    if args.command == "cleanup-cache":
        removed = await service.cleanup_expired_cache()
        print(f"Removed {removed} expired cache entries")
        return 0

    if args.command == "invalidate-cache":
        removed = await service.invalidate_cache()
        print(f"Removed {removed} cache entries")
        return 0

    raise AssertionError(f"Unhandled command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = JiraSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    service = JiraIssueService.from_settings(settings)
    try:
        return asyncio.run(_run(args, service))
    except JiraError as e:
        logger.error("Command failed", extra={"code": e.code, "command": args.command})
        print(f"{e.code}: {e.details}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
