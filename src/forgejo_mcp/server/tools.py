"""Tool registry and handlers.

A repository tool call runs these steps:

1. validate the raw arguments against the tool's argument model
2. resolve the directory or explicit repository to ``owner/repo``
3. detect the backend dialect (one version probe when ``auto``)
4. call the dialect's REST client
5. build the structured payload once and render its text

Argument, resolution and backend failures become error-flagged tool
results. Anything else propagates to the protocol layer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel

from .. import __version__
from ..config import ServerConfig
from ..exceptions import ArgumentValidationError, ToolNotFoundError
from ..remote import (
    Dialect,
    ForgeAPIError,
    ForgeClient,
    VersionProbe,
    client_for_dialect,
    detect_dialect,
)
from ..remote.detection import VersionProbeFn
from ..repository import RepositoryError, RepositoryResolver, ResolutionErrorKind
from . import arguments as args_
from .formatting import format_result

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]
ClientFactory = Callable[[Dialect, str, str, float], ForgeClient]
ProbeFactory = Callable[[], VersionProbeFn]


@dataclass
class ToolResult:
    """Result of a tool call in MCP ``tools/call`` shape."""

    text: str
    structured: Optional[Payload] = None
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(text=message, is_error=True)

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        result: dict = {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }
        if self.structured is not None:
            result["structuredContent"] = self.structured
        return result


@dataclass
class Tool:
    """A registered tool.

    Repository tools receive a REST client and the resolved ``owner/repo``;
    local tools receive only their validated arguments.
    """

    name: str
    description: str
    arguments: Type[BaseModel]
    handler: Callable[..., Awaitable[Payload]]
    needs_repository: bool = True

    def to_dict(self) -> dict:
        """Tool definition as listed by ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": args_.input_schema(self.arguments),
        }


_RESOLUTION_MESSAGES = {
    ResolutionErrorKind.DIRECTORY_NOT_FOUND: (
        "Directory not found: {path}. Provide the absolute path of an "
        "existing local working copy."
    ),
    ResolutionErrorKind.NOT_GIT_REPOSITORY: (
        "{path} is not a git repository. Use the root of a git working copy "
        "or pass 'repository' as owner/repo."
    ),
    ResolutionErrorKind.NO_REMOTES_CONFIGURED: (
        "No git remotes configured in {path}. Add one with "
        "'git remote add origin <url>' or pass 'repository' as owner/repo."
    ),
    ResolutionErrorKind.INVALID_REMOTE_URL: (
        "Could not determine owner/repo from remote URL {path}. Pass "
        "'repository' as owner/repo instead."
    ),
}


def describe_resolution_error(error: RepositoryError) -> str:
    """User-facing message for a repository resolution failure."""
    return _RESOLUTION_MESSAGES[error.kind].format(path=error.path)


# Handlers


async def issue_list(client: ForgeClient, repository: str, args) -> Payload:
    issues = await client.list_issues(repository, args.state, args.limit, args.offset)
    return {"issues": [issue.model_dump() for issue in issues]}


async def issue_create(client: ForgeClient, repository: str, args) -> Payload:
    issue = await client.create_issue(repository, args.title, args.body)
    return {"issue": issue.model_dump(), "action": "created"}


async def issue_edit(client: ForgeClient, repository: str, args) -> Payload:
    issue = await client.edit_issue(
        repository, args.issue_number, args.title, args.body, args.state
    )
    return {"issue": issue.model_dump(), "action": "updated"}


async def issue_comment_list(client: ForgeClient, repository: str, args) -> Payload:
    comments, total = await client.list_issue_comments(
        repository, args.issue_number, args.limit, args.offset
    )
    return {"comments": [c.model_dump() for c in comments], "total": total}


async def issue_comment_create(client: ForgeClient, repository: str, args) -> Payload:
    comment = await client.create_issue_comment(
        repository, args.issue_number, args.comment
    )
    return {"comment": comment.model_dump(), "action": "created"}


async def issue_comment_edit(client: ForgeClient, repository: str, args) -> Payload:
    comment = await client.edit_issue_comment(
        repository, args.comment_id, args.new_content
    )
    return {"comment": comment.model_dump(), "action": "updated"}


async def pr_list(client: ForgeClient, repository: str, args) -> Payload:
    pull_requests = await client.list_pull_requests(
        repository, args.state, args.limit, args.offset
    )
    return {"pull_requests": [pr.model_dump() for pr in pull_requests]}


async def pr_fetch(client: ForgeClient, repository: str, args) -> Payload:
    pr = await client.get_pull_request(repository, args.pull_request_number)
    return {"pull_request": pr.model_dump()}


async def pr_create(client: ForgeClient, repository: str, args) -> Payload:
    pr = await client.create_pull_request(
        repository,
        head=args.head,
        base=args.base,
        title=args.title,
        body=args.body,
        assignee=args.assignee,
        draft=args.draft,
    )
    return {"pull_request": pr.model_dump(), "action": "created"}


async def pr_edit(client: ForgeClient, repository: str, args) -> Payload:
    pr = await client.edit_pull_request(
        repository,
        args.pull_request_number,
        title=args.title,
        body=args.body,
        state=args.state,
        base_branch=args.base_branch,
    )
    return {"pull_request": pr.model_dump(), "action": "updated"}


async def pr_comment_list(client: ForgeClient, repository: str, args) -> Payload:
    comments, total = await client.list_issue_comments(
        repository, args.pull_request_number, args.limit, args.offset
    )
    return {"comments": [c.model_dump() for c in comments], "total": total}


async def pr_comment_create(client: ForgeClient, repository: str, args) -> Payload:
    comment = await client.create_issue_comment(
        repository, args.pull_request_number, args.comment
    )
    return {"comment": comment.model_dump(), "action": "created"}


async def pr_comment_edit(client: ForgeClient, repository: str, args) -> Payload:
    comment = await client.edit_issue_comment(
        repository, args.comment_id, args.new_content
    )
    return {"comment": comment.model_dump(), "action": "updated"}


async def notification_list(client: ForgeClient, repository: str, args) -> Payload:
    notifications = await client.list_notifications(
        repository, args.status, args.limit, args.offset
    )
    return {"notifications": [n.model_dump() for n in notifications]}


async def hello(args) -> Payload:
    return {"message": f"Hello from forgejo-mcp {__version__}"}


REPOSITORY_TOOLS: List[Tool] = [
    Tool(
        "issue_list",
        "List issues in a repository",
        args_.IssueListArguments,
        issue_list,
    ),
    Tool(
        "issue_create",
        "Create an issue",
        args_.IssueCreateArguments,
        issue_create,
    ),
    Tool(
        "issue_edit",
        "Edit the title, body or state of an issue",
        args_.IssueEditArguments,
        issue_edit,
    ),
    Tool(
        "issue_comment_list",
        "List comments on an issue",
        args_.IssueCommentListArguments,
        issue_comment_list,
    ),
    Tool(
        "issue_comment_create",
        "Add a comment to an issue",
        args_.IssueCommentCreateArguments,
        issue_comment_create,
    ),
    Tool(
        "issue_comment_edit",
        "Edit a comment on an issue",
        args_.IssueCommentEditArguments,
        issue_comment_edit,
    ),
    Tool(
        "pr_list",
        "List pull requests in a repository",
        args_.PullRequestListArguments,
        pr_list,
    ),
    Tool(
        "pr_fetch",
        "Fetch a single pull request",
        args_.PullRequestFetchArguments,
        pr_fetch,
    ),
    Tool(
        "pr_create",
        "Create a pull request",
        args_.PullRequestCreateArguments,
        pr_create,
    ),
    Tool(
        "pr_edit",
        "Edit the title, body, state or base branch of a pull request",
        args_.PullRequestEditArguments,
        pr_edit,
    ),
    Tool(
        "pr_comment_list",
        "List comments on a pull request",
        args_.PullRequestCommentListArguments,
        pr_comment_list,
    ),
    Tool(
        "pr_comment_create",
        "Add a comment to a pull request",
        args_.PullRequestCommentCreateArguments,
        pr_comment_create,
    ),
    Tool(
        "pr_comment_edit",
        "Edit a comment on a pull request",
        args_.PullRequestCommentEditArguments,
        pr_comment_edit,
    ),
    Tool(
        "notification_list",
        "List notifications for a repository",
        args_.NotificationListArguments,
        notification_list,
    ),
]

DEBUG_TOOLS: List[Tool] = [
    Tool(
        "hello",
        "Check that the server is running",
        args_.NoArguments,
        hello,
        needs_repository=False,
    ),
]


class ToolRegistry:
    """Registered tools and the per-call pipeline that runs them.

    Args:
        config: Server configuration
        resolver: Repository resolver (default: new RepositoryResolver)
        probe_factory: Creates the version probe for a call
        client_factory: Creates the REST client for a detected dialect
    """

    def __init__(
        self,
        config: ServerConfig,
        resolver: Optional[RepositoryResolver] = None,
        probe_factory: Optional[ProbeFactory] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config
        self.resolver = resolver or RepositoryResolver()
        self.probe_factory = probe_factory or self._default_probe
        self.client_factory = client_factory or client_for_dialect
        self._tools: Dict[str, Tool] = {}

        for tool in REPOSITORY_TOOLS:
            self.register(tool)
        if config.debug:
            for tool in DEBUG_TOOLS:
                self.register(tool)

    def _default_probe(self) -> VersionProbeFn:
        return VersionProbe(
            self.config.remote_url, self.config.auth_token, self.config.timeout
        )

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def list_tools(self) -> List[dict]:
        return [tool.to_dict() for tool in self._tools.values()]

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        """Run a tool.

        Raises:
            ToolNotFoundError: If no tool with this name is registered
        """
        tool = self.get(name)
        try:
            args = args_.parse_arguments(tool.arguments, arguments)
            if tool.needs_repository:
                payload = await self._call_repository_tool(tool, args)
            else:
                payload = await tool.handler(args)
        except ArgumentValidationError as e:
            logger.info(f"Invalid arguments for {name}: {e}")
            return ToolResult.error(f"Invalid arguments: {e}")
        except RepositoryError as e:
            logger.info(f"Repository resolution failed for {name}: {e}")
            return ToolResult.error(describe_resolution_error(e))
        except ForgeAPIError as e:
            logger.warning(f"Backend request failed for {name}: {e.message}")
            return ToolResult.error(f"API request failed: {e.message}")

        text = format_result(payload, self.config.compat_mode)
        return ToolResult(text=text, structured=payload)

    async def _call_repository_tool(self, tool: Tool, args: Any) -> Payload:
        resolution = self.resolver.resolve(args.target())
        dialect = await detect_dialect(self.config.client_type, self.probe_factory())
        logger.debug(
            f"Calling {tool.name} on {resolution.repository} ({dialect.value})"
        )
        async with self.client_factory(
            dialect,
            self.config.remote_url,
            self.config.auth_token,
            self.config.timeout,
        ) as client:
            return await tool.handler(client, resolution.repository, args)
