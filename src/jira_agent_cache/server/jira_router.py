"""Jira endpoints.

All routes are mounted under `/api`.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from jira_agent_cache.orchestrator.errors import JiraError, NotConfigured
from jira_agent_cache.orchestrator.issue_service import FetchOutcome, JiraIssueService
from jira_agent_cache.server.models import ApiResponse, JiraErrorInfo

logger = logging.getLogger(__name__)

router = APIRouter()


def _service(request: Request) -> JiraIssueService:
    service = getattr(request.app.state, "jira_service", None)
    if not isinstance(service, JiraIssueService):
        # This should never happen for the real app, but keeps the API fail-fast.
        raise HTTPException(status_code=500, detail="Jira service not configured")
    return service


def _error_response(error: JiraError) -> ApiResponse:
    if isinstance(error, NotConfigured):
        logger.warning("Claude MCP not configured", extra={"details": error.details})
    else:
        logger.error(
            "Jira fetch failed", extra={"code": error.code, "details": error.details}
        )
    return ApiResponse.error_with_data(JiraErrorInfo(code=error.code, details=error.details))


def _success_response(outcome: FetchOutcome, response: Response) -> ApiResponse:
    response.headers["X-Cache"] = "HIT" if outcome.from_cache else "MISS"
    logger.info("Successfully fetched Jira issues", extra={"total": outcome.response.total})
    return ApiResponse.ok(outcome.response)


@router.get("/jira/my-issues", response_model=ApiResponse)
async def fetch_my_jira_issues(request: Request, response: Response) -> ApiResponse:
    """Fetch assigned issues (served from the cache while it is valid)."""
    try:
        outcome = await _service(request).fetch()
    except JiraError as e:
        return _error_response(e)
    return _success_response(outcome, response)


@router.post("/jira/refresh", response_model=ApiResponse)
async def refresh_jira_issues(request: Request, response: Response) -> ApiResponse:
    """Force refresh assigned issues (bypasses the cache)."""
    try:
        outcome = await _service(request).refresh()
    except JiraError as e:
        return _error_response(e)
    return _success_response(outcome, response)
