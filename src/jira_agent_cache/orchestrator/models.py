"""Domain models for assigned Jira issues."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field


class JiraIssue(BaseModel):
    """A Jira issue as returned to callers."""

    key: str = Field(description='Issue key, e.g. "PROJ-123"')
    summary: str
    status: str = Field(description='Current status, e.g. "In Progress"')
    issue_type: str | None = Field(default=None, description='e.g. "Story", "Bug", "Task"')
    priority: str | None = None
    url: str | None = Field(default=None, description="Direct URL to the issue in Jira")
    description: str | None = None


class JiraIssuesResponse(BaseModel):
    issues: list[JiraIssue] = Field(default_factory=list)
    total: int = 0

    @classmethod
    def from_issues(cls, issues: Iterable[JiraIssue]) -> JiraIssuesResponse:
        items = list(issues)
        return cls(issues=items, total=len(items))
