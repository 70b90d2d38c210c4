"""
Tool argument models.

Each tool validates its raw argument mapping through one of the pydantic
models below. The same models generate the JSON input schemas advertised by
``tools/list``.
"""

from typing import Any, Dict, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..exceptions import ArgumentValidationError
from ..repository import RepositoryTarget, target_from_arguments

DEFAULT_LIMIT = 15
MAX_LIMIT = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


class NoArguments(BaseModel):
    """Arguments of tools that take none."""

    pass


class RepositoryArguments(BaseModel):
    """Repository target shared by every repository tool."""

    directory: Optional[str] = Field(
        None,
        description=(
            "Absolute path to a local git working copy; the repository is "
            "resolved from its remotes (origin preferred)"
        ),
    )
    repository: Optional[str] = Field(
        None, description="Repository in 'owner/repo' format"
    )

    def target(self) -> RepositoryTarget:
        """Validated target; raises ArgumentValidationError."""
        return target_from_arguments(self.directory, self.repository)


class PaginationArguments(RepositoryArguments):
    limit: int = Field(
        DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Maximum number of items"
    )
    offset: int = Field(0, ge=0, description="Number of items to skip")


class IssueListArguments(PaginationArguments):
    state: Literal["open", "closed", "all"] = Field(
        "open", description="Filter by issue state"
    )


class IssueCreateArguments(RepositoryArguments):
    title: str = Field(..., min_length=1, description="Issue title")
    body: str = Field("", description="Issue description")


class IssueEditArguments(RepositoryArguments):
    issue_number: int = Field(..., ge=1, description="Issue number")
    title: Optional[str] = Field(None, min_length=1, description="New title")
    body: Optional[str] = Field(None, description="New description")
    state: Optional[Literal["open", "closed"]] = Field(None, description="New state")

    @model_validator(mode="after")
    def require_change(self) -> "IssueEditArguments":
        if self.title is None and self.body is None and self.state is None:
            raise ValueError("at least one of title, body or state must be provided")
        return self


class IssueCommentListArguments(PaginationArguments):
    issue_number: int = Field(..., ge=1, description="Issue number")


class IssueCommentCreateArguments(RepositoryArguments):
    issue_number: int = Field(..., ge=1, description="Issue number")
    comment: str = Field(..., min_length=1, description="Comment text")


class IssueCommentEditArguments(RepositoryArguments):
    issue_number: int = Field(..., ge=1, description="Issue number")
    comment_id: int = Field(..., ge=1, description="ID of the comment to edit")
    new_content: str = Field(..., min_length=1, description="Replacement text")


class PullRequestListArguments(PaginationArguments):
    state: Literal["open", "closed", "all"] = Field(
        "open", description="Filter by pull request state"
    )


class PullRequestFetchArguments(RepositoryArguments):
    pull_request_number: int = Field(..., ge=1, description="Pull request number")


class PullRequestCreateArguments(RepositoryArguments):
    head: str = Field(..., min_length=1, description="Source branch")
    base: str = Field(..., min_length=1, description="Target branch")
    title: str = Field(..., min_length=1, description="Pull request title")
    body: str = Field("", description="Pull request description")
    assignee: Optional[str] = Field(None, description="User to assign")
    draft: bool = Field(False, description="Open as a work-in-progress pull request")


class PullRequestEditArguments(RepositoryArguments):
    pull_request_number: int = Field(..., ge=1, description="Pull request number")
    title: Optional[str] = Field(None, min_length=1, description="New title")
    body: Optional[str] = Field(None, description="New description")
    state: Optional[Literal["open", "closed"]] = Field(None, description="New state")
    base_branch: Optional[str] = Field(
        None, min_length=1, description="New target branch"
    )

    @model_validator(mode="after")
    def require_change(self) -> "PullRequestEditArguments":
        if all(
            value is None
            for value in (self.title, self.body, self.state, self.base_branch)
        ):
            raise ValueError(
                "at least one of title, body, state or base_branch must be provided"
            )
        return self


class PullRequestCommentListArguments(PaginationArguments):
    pull_request_number: int = Field(..., ge=1, description="Pull request number")


class PullRequestCommentCreateArguments(RepositoryArguments):
    pull_request_number: int = Field(..., ge=1, description="Pull request number")
    comment: str = Field(..., min_length=1, description="Comment text")


class PullRequestCommentEditArguments(RepositoryArguments):
    pull_request_number: int = Field(..., ge=1, description="Pull request number")
    comment_id: int = Field(..., ge=1, description="ID of the comment to edit")
    new_content: str = Field(..., min_length=1, description="Replacement text")


class NotificationListArguments(PaginationArguments):
    status: Literal["read", "unread", "all"] = Field(
        "unread", description="Filter by read status"
    )


def _describe_validation_error(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        message = item["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def parse_arguments(
    model: Type[ModelT], arguments: Optional[Mapping[str, Any]]
) -> ModelT:
    """Validate raw tool arguments against a model.

    Raises:
        ArgumentValidationError: If the arguments do not match the model
    """
    try:
        return model.model_validate(dict(arguments or {}))
    except ValidationError as e:
        raise ArgumentValidationError(_describe_validation_error(e)) from e


def input_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """JSON schema advertised for a tool's arguments."""
    schema = model.model_json_schema()
    schema.pop("title", None)
    schema.pop("description", None)
    schema.setdefault("properties", {})
    return schema
