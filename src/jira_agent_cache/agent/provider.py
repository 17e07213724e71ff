"""Abstract base class for issue fetchers."""

from abc import ABC, abstractmethod

from jira_agent_cache.orchestrator.models import JiraIssuesResponse


class IssueFetcher(ABC):
    """Source of the current user's assigned Jira issues.

    This interface allows the caching layer to be driven by any backend
    (the Claude CLI, a direct REST client, a fake in tests).
    """

    @property
    def name(self) -> str:
        """Human-readable fetcher name."""
        return type(self).__name__

    @abstractmethod
    async def fetch_issues(self) -> JiraIssuesResponse:
        """Fetch assigned, unresolved issues without any caching.

        Returns:
            The fetched issues.

        Raises:
            JiraError: One of the classified fetch failures.
        """
        pass
