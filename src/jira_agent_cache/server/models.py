"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel

from jira_agent_cache.orchestrator.models import JiraIssuesResponse


class JiraErrorInfo(BaseModel):
    code: str
    details: str


class ApiResponse(BaseModel):
    """Envelope shared by the Jira endpoints.

    Failures are reported in-band (HTTP 200, ``success=False``) so the UI can
    show ``error_data.details`` directly.
    """

    success: bool
    data: JiraIssuesResponse | None = None
    error_data: JiraErrorInfo | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: JiraIssuesResponse) -> ApiResponse:
        return cls(success=True, data=data)

    @classmethod
    def error_with_data(cls, error: JiraErrorInfo) -> ApiResponse:
        return cls(success=False, error_data=error)
