"""Unit tests for the tool registry and handlers."""

import asyncio

import pytest

from forgejo_mcp.config import ServerConfig
from forgejo_mcp.exceptions import ToolNotFoundError
from forgejo_mcp.remote import VersionInfo
from forgejo_mcp.repository import (
    DirectoryNotFoundError,
    InvalidRemoteURLError,
    NoRemotesConfiguredError,
    NotGitRepositoryError,
)
from forgejo_mcp.server import ToolRegistry, describe_resolution_error

BASE = "https://forge.example.com"
REPO_API = f"{BASE}/api/v1/repos/owner/repo"
VERSION_URL = f"{BASE}/api/v1/version"


def make_config(**overrides):
    values = {"remote_url": BASE, "auth_token": "tok", "client_type": "gitea"}
    values.update(overrides)
    return ServerConfig(**values)


def issue_json(number, pull_request=None):
    data = {
        "id": number,
        "number": number,
        "title": f"Issue {number}",
        "state": "open",
        "body": "",
        "user": {"login": "alice"},
    }
    if pull_request is not None:
        data["pull_request"] = pull_request
    return data


def comment_json(comment_id, body):
    return {"id": comment_id, "body": body, "user": {"login": "carol"}}


@pytest.fixture
def git_repo(tmp_path):
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / ".git" / "config").write_text(
        '[remote "origin"]\n\turl = git@forge.example.com:owner/repo.git\n'
    )
    return repo


class TestRegistry:
    """Test tool registration and listing."""

    def test_lists_repository_tools(self):
        names = [tool["name"] for tool in ToolRegistry(make_config()).list_tools()]

        assert names == [
            "issue_list",
            "issue_create",
            "issue_edit",
            "issue_comment_list",
            "issue_comment_create",
            "issue_comment_edit",
            "pr_list",
            "pr_fetch",
            "pr_create",
            "pr_edit",
            "pr_comment_list",
            "pr_comment_create",
            "pr_comment_edit",
            "notification_list",
        ]

    def test_hello_only_in_debug_mode(self):
        registry = ToolRegistry(make_config(debug=True))

        assert "hello" in [tool["name"] for tool in registry.list_tools()]

    def test_tool_definition_has_schema(self):
        tool = ToolRegistry(make_config()).get("issue_list").to_dict()

        assert tool["description"]
        assert "directory" in tool["inputSchema"]["properties"]

    def test_unknown_tool(self):
        with pytest.raises(ToolNotFoundError):
            ToolRegistry(make_config()).get("hello")


class TestDescribeResolutionError:
    """Test user-facing resolution messages."""

    @pytest.mark.parametrize(
        "error,fragment",
        [
            (DirectoryNotFoundError("/x"), "Directory not found: /x"),
            (NotGitRepositoryError("/x"), "/x is not a git repository"),
            (NoRemotesConfiguredError("/x"), "No git remotes configured in /x"),
            (InvalidRemoteURLError("bad"), "remote URL bad"),
        ],
    )
    def test_message_per_kind(self, error, fragment):
        assert fragment in describe_resolution_error(error)


@pytest.mark.asyncio
class TestToolCalls:
    """Test tool calls end to end against a mocked backend."""

    async def test_issue_list_by_repository(self, httpx_mock):
        httpx_mock.add_response(
            method="GET",
            url=f"{REPO_API}/issues?page=1&limit=15&state=open&type=issues",
            json=[issue_json(1), issue_json(2)],
        )

        result = await ToolRegistry(make_config()).call(
            "issue_list", {"repository": "owner/repo"}
        )

        assert not result.is_error
        assert result.text == "Found 2 issues"
        assert [i["number"] for i in result.structured["issues"]] == [1, 2]

    async def test_issue_list_by_directory(self, httpx_mock, git_repo):
        httpx_mock.add_response(
            method="GET",
            url=f"{REPO_API}/issues?page=1&limit=15&state=open&type=issues",
            json=[issue_json(1)],
        )

        result = await ToolRegistry(make_config()).call(
            "issue_list", {"directory": str(git_repo)}
        )

        assert result.structured["issues"][0]["title"] == "Issue 1"

    async def test_compat_mode_changes_text_only(self, httpx_mock):
        comments = [comment_json(1, "First"), comment_json(2, "Second")]
        for _ in range(2):
            httpx_mock.add_response(
                method="GET", url=f"{REPO_API}/issues/4/comments", json=comments
            )
        arguments = {"repository": "owner/repo", "issue_number": 4}

        terse = await ToolRegistry(make_config()).call("issue_comment_list", arguments)
        verbose = await ToolRegistry(make_config(compat_mode=True)).call(
            "issue_comment_list", arguments
        )

        assert terse.structured == verbose.structured
        assert terse.text == "Found 2 comments"
        assert verbose.text.splitlines()[1:] == [
            "- Comment #1 by carol: First",
            "- Comment #2 by carol: Second",
        ]

    async def test_pr_comment_create(self, httpx_mock):
        httpx_mock.add_response(
            method="POST",
            url=f"{REPO_API}/issues/8/comments",
            json=comment_json(11, "Nice"),
        )

        result = await ToolRegistry(make_config()).call(
            "pr_comment_create",
            {"repository": "owner/repo", "pull_request_number": 8, "comment": "Nice"},
        )

        assert result.text == "Comment #11 created"
        assert result.structured["action"] == "created"

    async def test_auto_dialect_probes_backend(self, httpx_mock):
        httpx_mock.add_response(
            method="GET", url=VERSION_URL, json={"version": "7.0.5+gitea-1.21.0"}
        )
        httpx_mock.add_response(
            method="GET",
            url=f"{REPO_API}/issues?page=1&limit=15&state=open&type=issues",
            json=[issue_json(1), issue_json(2, pull_request={"merged": False})],
        )

        result = await ToolRegistry(make_config(client_type="auto")).call(
            "issue_list", {"repository": "owner/repo"}
        )

        # Forgejo client leaves server-side filtering alone
        assert len(result.structured["issues"]) == 2

    async def test_failed_probe_falls_back_to_gitea(self, httpx_mock):
        httpx_mock.add_response(method="GET", url=VERSION_URL, status_code=500)
        httpx_mock.add_response(
            method="GET",
            url=f"{REPO_API}/issues?page=1&limit=15&state=open&type=issues",
            json=[issue_json(1), issue_json(2, pull_request={"merged": False})],
        )

        result = await ToolRegistry(make_config(client_type="auto")).call(
            "issue_list", {"repository": "owner/repo"}
        )

        assert not result.is_error
        assert len(result.structured["issues"]) == 1

    async def test_missing_target(self):
        result = await ToolRegistry(make_config()).call("issue_list", {})

        assert result.is_error
        assert result.structured is None
        assert "at least one of directory or repository must be provided" in result.text

    async def test_invalid_limit(self):
        result = await ToolRegistry(make_config()).call(
            "issue_list", {"repository": "owner/repo", "limit": 500}
        )

        assert result.is_error
        assert result.text.startswith("Invalid arguments: limit")

    async def test_resolution_error(self, tmp_path):
        result = await ToolRegistry(make_config()).call(
            "pr_list", {"directory": str(tmp_path)}
        )

        assert result.is_error
        assert "is not a git repository" in result.text

    async def test_api_error(self, httpx_mock):
        httpx_mock.add_response(
            method="GET",
            url=f"{REPO_API}/pulls/9",
            status_code=404,
            json={"message": "not found"},
        )

        result = await ToolRegistry(make_config()).call(
            "pr_fetch", {"repository": "owner/repo", "pull_request_number": 9}
        )

        assert result.is_error
        assert "not found" in result.text

    async def test_empty_create_response_is_error_result(self, httpx_mock):
        httpx_mock.add_response(method="POST", url=f"{REPO_API}/issues", text="")

        result = await ToolRegistry(make_config()).call(
            "issue_create", {"repository": "owner/repo", "title": "Bug"}
        )

        assert result.is_error
        assert "API request failed" in result.text

    async def test_unknown_tool_raises(self):
        with pytest.raises(ToolNotFoundError):
            await ToolRegistry(make_config()).call("nope", {})

    async def test_hello(self):
        result = await ToolRegistry(make_config(debug=True)).call("hello", {})

        assert result.text.startswith("Hello from forgejo-mcp")
        assert result.to_dict()["structuredContent"] == {"message": result.text}

    async def test_cancelled_probe_cancels_call(self):
        started = asyncio.Event()

        async def slow_probe():
            started.set()
            await asyncio.sleep(60)
            return VersionInfo(version="1.21.0")

        registry = ToolRegistry(
            make_config(client_type="auto"), probe_factory=lambda: slow_probe
        )
        task = asyncio.ensure_future(
            registry.call("issue_list", {"repository": "owner/repo"})
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestToolResult:
    """Test MCP result shape."""

    def test_error_result_shape(self):
        from forgejo_mcp.server import ToolResult

        assert ToolResult.error("boom").to_dict() == {
            "content": [{"type": "text", "text": "boom"}],
            "isError": True,
        }
