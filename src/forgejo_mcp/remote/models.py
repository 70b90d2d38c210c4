"""
Forge data models.

Normalized views of Forgejo/Gitea API objects. Their ``model_dump()`` form is
what tools return as structured content, independent of backend dialect.
"""

from typing import Optional
from pydantic import BaseModel, Field


class PullRequestBranch(BaseModel):
    """Branch reference of a pull request."""

    ref: str = Field(default="", description="Branch name")
    sha: str = Field(default="", description="Head commit SHA")


class Issue(BaseModel):
    """Issue summary."""

    id: int = Field(..., description="Issue ID")
    number: int = Field(..., description="Issue number within the repository")
    title: str = Field(..., description="Issue title")
    state: str = Field(..., description="Issue state (open/closed)")
    body: str = Field(default="", description="Issue body")
    user: str = Field(default="", description="Author login")
    created: str = Field(default="", description="Creation timestamp")
    updated: str = Field(default="", description="Last update timestamp")


class Comment(BaseModel):
    """Issue or pull request comment."""

    id: int = Field(..., description="Comment ID")
    body: str = Field(default="", description="Comment body")
    user: str = Field(default="", description="Author login")
    created: str = Field(default="", description="Creation timestamp")
    updated: str = Field(default="", description="Last update timestamp")


class PullRequest(BaseModel):
    """Pull request details."""

    id: int = Field(..., description="Pull request ID")
    number: int = Field(..., description="Pull request number")
    title: str = Field(..., description="Pull request title")
    state: str = Field(..., description="Pull request state (open/closed)")
    body: str = Field(default="", description="Pull request body")
    user: str = Field(default="", description="Author login")
    created: str = Field(default="", description="Creation timestamp")
    updated: str = Field(default="", description="Last update timestamp")
    head: PullRequestBranch = Field(default_factory=PullRequestBranch)
    base: PullRequestBranch = Field(default_factory=PullRequestBranch)
    mergeable: Optional[bool] = Field(None, description="Whether it can be merged")
    merged: bool = Field(default=False, description="Whether it has been merged")
    html_url: str = Field(default="", description="Web URL")


class Notification(BaseModel):
    """Notification thread."""

    id: int = Field(..., description="Notification thread ID")
    repository: str = Field(default="", description="Repository full name")
    subject_title: str = Field(default="", description="Subject title")
    subject_type: str = Field(default="", description="Subject type (Issue/Pull)")
    subject_url: str = Field(default="", description="Subject API URL")
    unread: bool = Field(default=False, description="Whether it is unread")
    pinned: bool = Field(default=False, description="Whether it is pinned")
    updated: str = Field(default="", description="Last update timestamp")
