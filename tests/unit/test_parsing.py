"""Unit tests for decoding Claude CLI output."""

from __future__ import annotations

import json

import pytest

from jira_agent_cache.agent.parsing import (
    RawJiraIssue,
    extract_json_array,
    parse_agent_output,
    parse_issues,
)
from jira_agent_cache.orchestrator.errors import ClaudeError, ParseError
from jira_agent_cache.orchestrator.models import JiraIssue


def _envelope(result: str, *, is_error: bool = False) -> str:
    return json.dumps({"type": "result", "is_error": is_error, "result": result})


def test_extract_json_array_from_markdown_code_block() -> None:
    text = 'Here\'s the result:\n```json\n[{"key": "TEST-1", "summary": "Test"}]\n```\nDone!'
    assert extract_json_array(text) == '[{"key": "TEST-1", "summary": "Test"}]'


def test_extract_json_array_from_plain_code_block() -> None:
    text = '```\n[{"key": "TEST-1"}]\n```'
    assert extract_json_array(text) == '[{"key": "TEST-1"}]'


def test_extract_json_array_raw() -> None:
    text = '[{"key": "TEST-1", "summary": "Test issue"}]'
    assert extract_json_array(text) == text


def test_extract_json_array_with_surrounding_text() -> None:
    text = 'The issues are: [{"key": "A-1"}] and that\'s all.'
    assert extract_json_array(text) == '[{"key": "A-1"}]'


def test_extract_json_array_no_array() -> None:
    assert extract_json_array("No JSON here, just text.") is None


def test_extract_json_array_closing_bracket_before_opening() -> None:
    assert extract_json_array("] nothing [") is None


def test_extract_json_array_prefers_tagged_fence_over_inline_brackets() -> None:
    text = 'See [docs] first.\n```json\n[{"key": "A-1"}]\n```\nThen [more].'
    assert extract_json_array(text) == '[{"key": "A-1"}]'


def test_extract_json_array_unterminated_fence_falls_back_to_brackets() -> None:
    text = '```json\n[{"key": "A-1"}]'
    assert extract_json_array(text) == '[{"key": "A-1"}]'


def test_raw_issue_minimal_fields() -> None:
    issue = RawJiraIssue.model_validate_json('{"key":"PROJ-123","summary":"Fix bug","status":"Open"}')

    assert issue.key == "PROJ-123"
    assert issue.summary == "Fix bug"
    assert issue.status == "Open"
    assert issue.issue_type is None
    assert issue.description is None


def test_raw_issue_accepts_camel_case_issue_type() -> None:
    issue = RawJiraIssue.model_validate(
        {
            "key": "PROJ-456",
            "summary": "Add feature",
            "status": "In Progress",
            "issueType": "Story",
            "priority": "High",
            "url": "https://example.atlassian.net/browse/PROJ-456",
            "description": "Full description here",
        }
    )

    assert issue.issue_type == "Story"
    assert issue.priority == "High"
    assert issue.to_issue() == JiraIssue(
        key="PROJ-456",
        summary="Add feature",
        status="In Progress",
        issue_type="Story",
        priority="High",
        url="https://example.atlassian.net/browse/PROJ-456",
        description="Full description here",
    )


def test_raw_issue_accepts_snake_case_issue_type() -> None:
    issue = RawJiraIssue.model_validate(
        {"key": "A-1", "summary": "S", "status": "Open", "issue_type": "Bug"}
    )
    assert issue.issue_type == "Bug"


def test_parse_issues_rejects_malformed_json_with_bounded_excerpt() -> None:
    broken = "[" + "x" * 2000

    with pytest.raises(ParseError) as exc_info:
        parse_issues(broken)

    assert exc_info.value.details.startswith("Failed to parse issues JSON")
    assert "x" * 499 in exc_info.value.details
    assert "x" * 500 not in exc_info.value.details


def test_parse_issues_rejects_missing_required_field() -> None:
    with pytest.raises(ParseError, match="summary"):
        parse_issues('[{"key": "A-1", "status": "Open"}]')


def test_parse_agent_output_from_fenced_result() -> None:
    stdout = _envelope('```json\n[{"key":"A-1","summary":"S","status":"Open"}]\n```')

    response = parse_agent_output(stdout)

    assert response.total == 1
    assert response.issues == [JiraIssue(key="A-1", summary="S", status="Open")]


def test_parse_agent_output_empty_array() -> None:
    response = parse_agent_output(_envelope("[]"))

    assert response.issues == []
    assert response.total == 0


def test_parse_agent_output_is_error_defaults_to_false() -> None:
    stdout = json.dumps({"result": '[{"key":"A-1","summary":"S","status":"Open"}]'})
    assert parse_agent_output(stdout).total == 1


def test_parse_agent_output_surfaces_claude_error_verbatim() -> None:
    with pytest.raises(ClaudeError) as exc_info:
        parse_agent_output(_envelope("MCP server 'atlassian' is not connected", is_error=True))

    assert exc_info.value.details == "MCP server 'atlassian' is not connected"
    assert exc_info.value.code == "CLAUDE_ERROR"


def test_parse_agent_output_invalid_envelope_includes_bounded_raw_output() -> None:
    raw = "Error: not logged in. " + "y" * 1000

    with pytest.raises(ParseError) as exc_info:
        parse_agent_output(raw)

    details = exc_info.value.details
    assert details.startswith("Failed to parse Claude response")
    assert "Raw: Error: not logged in." in details
    assert "y" * 478 in details
    assert "y" * 479 not in details


def test_parse_agent_output_without_array() -> None:
    with pytest.raises(ParseError, match="Could not find JSON array in response"):
        parse_agent_output(_envelope("You have no assigned issues."))
