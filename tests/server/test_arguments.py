"""Unit tests for tool argument validation."""

import pytest

from forgejo_mcp.exceptions import ArgumentValidationError
from forgejo_mcp.repository import ByDirectory, ByRepository
from forgejo_mcp.server.arguments import (
    IssueCreateArguments,
    IssueEditArguments,
    IssueListArguments,
    NoArguments,
    NotificationListArguments,
    PullRequestEditArguments,
    input_schema,
    parse_arguments,
)


class TestParseArguments:
    """Test validation of raw argument mappings."""

    def test_defaults(self):
        args = parse_arguments(IssueListArguments, {"repository": "owner/repo"})

        assert args.limit == 15
        assert args.offset == 0
        assert args.state == "open"

    def test_none_arguments(self):
        assert isinstance(parse_arguments(NoArguments, None), NoArguments)

    @pytest.mark.parametrize("limit", [0, 101, -1])
    def test_limit_range(self, limit):
        with pytest.raises(ArgumentValidationError, match="limit"):
            parse_arguments(IssueListArguments, {"repository": "o/r", "limit": limit})

    def test_negative_offset(self):
        with pytest.raises(ArgumentValidationError, match="offset"):
            parse_arguments(IssueListArguments, {"repository": "o/r", "offset": -1})

    def test_invalid_state(self):
        with pytest.raises(ArgumentValidationError, match="state"):
            parse_arguments(IssueListArguments, {"repository": "o/r", "state": "merged"})

    def test_notification_status(self):
        args = parse_arguments(NotificationListArguments, {"repository": "o/r"})

        assert args.status == "unread"
        with pytest.raises(ArgumentValidationError):
            parse_arguments(NotificationListArguments, {"repository": "o/r", "status": "new"})

    def test_missing_required_field(self):
        with pytest.raises(ArgumentValidationError, match="title"):
            parse_arguments(IssueCreateArguments, {"repository": "o/r"})

    def test_edit_requires_a_change(self):
        with pytest.raises(ArgumentValidationError) as exc_info:
            parse_arguments(IssueEditArguments, {"repository": "o/r", "issue_number": 1})

        assert str(exc_info.value) == "at least one of title, body or state must be provided"

    def test_pull_request_edit_base_branch_only(self):
        args = parse_arguments(
            PullRequestEditArguments,
            {"repository": "o/r", "pull_request_number": 2, "base_branch": "dev"},
        )

        assert args.base_branch == "dev"


class TestTarget:
    """Test repository target extraction."""

    def test_directory(self):
        args = parse_arguments(IssueListArguments, {"directory": "/work/repo"})

        assert args.target() == ByDirectory("/work/repo")

    def test_repository(self):
        args = parse_arguments(IssueListArguments, {"repository": "owner/repo"})

        assert args.target() == ByRepository("owner/repo")

    def test_neither(self):
        args = parse_arguments(IssueListArguments, {})

        with pytest.raises(ArgumentValidationError):
            args.target()


class TestInputSchema:
    """Test JSON schema generation."""

    def test_schema_lists_properties(self):
        schema = input_schema(IssueEditArguments)

        assert schema["type"] == "object"
        assert {"directory", "repository", "issue_number", "state"} <= set(
            schema["properties"]
        )
        assert schema["required"] == ["issue_number"]
        assert "title" not in schema

    def test_empty_schema(self):
        schema = input_schema(NoArguments)

        assert schema["properties"] == {}
