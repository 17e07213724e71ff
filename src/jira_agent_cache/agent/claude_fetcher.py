"""Fetch assigned Jira issues through the Claude CLI's Atlassian MCP tools.

The CLI is run non-interactively with stdin closed, so it can never block
waiting for input, under a fixed wall-clock timeout. When the timeout fires the
whole process group is killed on a best-effort basis and any partial output
is discarded. Reaping is bounded, so a helper that left the group while holding
the output pipes open cannot extend the timeout.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import shutil
import signal
from dataclasses import dataclass

from jira_agent_cache.agent.parsing import parse_agent_output
from jira_agent_cache.agent.provider import IssueFetcher
from jira_agent_cache.orchestrator.config import JiraSettings
from jira_agent_cache.orchestrator.errors import ExecutionError, FetchTimeout, NotConfigured
from jira_agent_cache.orchestrator.models import JiraIssuesResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30

# Upper bound on reaping a killed process; its pipes may outlive it.
REAP_TIMEOUT_SECONDS = 1.0

MY_ISSUES_PROMPT = (
    "Use the Atlassian MCP search tool to find my assigned Jira issues that are not "
    "resolved. For each issue found, also fetch the full issue details to get the "
    "description. Return ONLY a valid JSON array (no markdown, no explanation) with "
    'objects containing these exact keys: "key", "summary", "status", "url", '
    '"description". The url should be the full Jira issue URL. The description should '
    "be the full ticket description text. Example format: "
    '[{"key":"PROJ-123","summary":"Fix bug","status":"In Progress",'
    '"url":"https://company.atlassian.net/browse/PROJ-123",'
    '"description":"Full description text here..."}]'
)


@dataclass(frozen=True, slots=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


async def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Kill the CLI and every helper it spawned, then reap it within a bounded wait."""

    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(process.pid, signal.SIGKILL)
    with contextlib.suppress(TimeoutError):
        await asyncio.wait_for(process.wait(), timeout=REAP_TIMEOUT_SECONDS)


class ClaudeMcpFetcher(IssueFetcher):
    """Runs ``claude -p`` and decodes the issue list it prints."""

    def __init__(
        self,
        *,
        executable: str = "claude",
        model: str = "haiku",
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        prompt: str = MY_ISSUES_PROMPT,
    ) -> None:
        self.executable = executable
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.prompt = prompt

    @classmethod
    def from_settings(cls, settings: JiraSettings) -> ClaudeMcpFetcher:
        return cls(
            executable=settings.claude_executable,
            model=settings.claude_model,
            timeout_seconds=settings.fetch_timeout_seconds,
        )

    @property
    def name(self) -> str:
        return "Claude MCP Fetcher"

    def build_args(self) -> list[str]:
        return [
            "-p",
            "--permission-mode",
            "bypassPermissions",
            "--output-format",
            "json",
            "--model",
            self.model,
            self.prompt,
        ]

    def _resolve_executable(self) -> str:
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise NotConfigured(f"'{self.executable}' executable not found on PATH")
        return resolved

    async def run(self) -> ProcessResult:
        """Run the CLI and capture its output.

        Raises:
            NotConfigured: The executable cannot be found.
            ExecutionError: The process could not be started.
            FetchTimeout: The process did not finish within ``timeout_seconds``.
        """

        executable = self._resolve_executable()
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *self.build_args(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            raise ExecutionError(f"Failed to run claude command: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except TimeoutError:
            await _kill_process_group(process)
            raise FetchTimeout(self.timeout_seconds) from None

        return ProcessResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def fetch_issues(self) -> JiraIssuesResponse:
        result = await self.run()
        if result.returncode != 0:
            raise ExecutionError(f"Claude command failed: {result.stderr}")

        logger.debug("Claude response", extra={"stdout": result.stdout})
        response = parse_agent_output(result.stdout)
        logger.info(
            "Successfully fetched Jira issues via Claude MCP", extra={"total": response.total}
        )
        return response
