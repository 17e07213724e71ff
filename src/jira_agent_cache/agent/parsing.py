"""Decoding of Claude CLI output into Jira issues.

The CLI is run with ``--output-format json`` and prints an envelope::

    {"is_error": false, "result": "<free text>"}

The model is asked for a bare JSON array, but ``result`` is free text: it may
wrap the array in a Markdown fence or surround it with prose. Extraction tries,
in order:

1. a fenced block tagged ``json``
2. an untagged fenced block whose content starts with ``[``
3. everything from the first ``[`` to the last ``]``
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from jira_agent_cache.orchestrator.errors import ClaudeError, ParseError, excerpt
from jira_agent_cache.orchestrator.models import JiraIssue, JiraIssuesResponse

_FENCE = "```"
_JSON_FENCE = "```json"
_PLAIN_ARRAY_FENCE = "```\n["


class ClaudeEnvelope(BaseModel):
    """Top-level object printed by ``claude --output-format json``."""

    model_config = ConfigDict(extra="ignore")

    is_error: bool = False
    result: str


class RawJiraIssue(BaseModel):
    """Leniently-typed issue as written by the model.

    Accepts ``issueType`` as well as ``issue_type``; every optional field
    defaults to None.
    """

    model_config = ConfigDict(extra="ignore")

    key: str
    summary: str
    status: str
    issue_type: str | None = Field(
        default=None, validation_alias=AliasChoices("issue_type", "issueType")
    )
    priority: str | None = None
    url: str | None = None
    description: str | None = None

    def to_issue(self) -> JiraIssue:
        return JiraIssue(
            key=self.key,
            summary=self.summary,
            status=self.status,
            issue_type=self.issue_type,
            priority=self.priority,
            url=self.url,
            description=self.description,
        )


_RAW_ISSUES = TypeAdapter(list[RawJiraIssue])


def extract_json_array(text: str) -> str | None:
    """Locate a JSON array inside free-form model output.

    Returns the array text (fenced content is stripped), or None if nothing
    resembling an array is present. The result is not validated as JSON.
    """

    start = text.find(_JSON_FENCE)
    if start != -1:
        after = text[start + len(_JSON_FENCE) :]
        end = after.find(_FENCE)
        if end != -1:
            return after[:end].strip()

    start = text.find(_PLAIN_ARRAY_FENCE)
    if start != -1:
        # Keep the "[" that matched.
        after = text[start + len(_FENCE) + 1 :]
        end = after.find(_FENCE)
        if end != -1:
            return after[:end].strip()

    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        return text[start : end + 1]

    return None


def parse_envelope(stdout: str) -> ClaudeEnvelope:
    try:
        return ClaudeEnvelope.model_validate_json(stdout)
    except ValidationError as e:
        raise ParseError(
            f"Failed to parse Claude response: {_first_error(e)}. Raw: {excerpt(stdout)}"
        ) from e


def parse_issues(json_text: str) -> list[JiraIssue]:
    try:
        raw_issues = _RAW_ISSUES.validate_json(json_text)
    except ValidationError as e:
        raise ParseError(
            f"Failed to parse issues JSON: {_first_error(e)}. JSON: {excerpt(json_text)}"
        ) from e
    return [raw.to_issue() for raw in raw_issues]


def parse_agent_output(stdout: str) -> JiraIssuesResponse:
    """Turn raw CLI stdout into a response.

    Raises:
        ParseError: The envelope, the array extraction or the array itself is malformed.
        ClaudeError: The CLI reported ``is_error``.
    """

    envelope = parse_envelope(stdout)
    if envelope.is_error:
        raise ClaudeError(envelope.result)

    json_text = extract_json_array(envelope.result)
    if json_text is None:
        raise ParseError(f"Could not find JSON array in response: {excerpt(envelope.result)}")

    return JiraIssuesResponse.from_issues(parse_issues(json_text))


def _first_error(error: ValidationError) -> str:
    errors = error.errors(include_url=False)
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid")
    return f"{location}: {message}" if location else message
