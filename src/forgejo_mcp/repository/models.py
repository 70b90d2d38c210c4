"""Data models for repository resolution."""

from dataclasses import dataclass
from typing import Union

from .url_parser import parse_remote_url


@dataclass(frozen=True)
class GitRemote:
    """A named remote read from git configuration."""

    name: str
    url: str


@dataclass(frozen=True)
class RepositoryResolution:
    """Result of resolving a directory or explicit name to a repository.

    Attributes:
        directory: Directory that was resolved (empty for explicit names)
        repository: Canonical ``owner/repo`` identifier
        remote_url: Remote URL as read from git configuration, unmodified
        remote_name: Name of the selected remote (e.g. ``origin``)
    """

    directory: str
    repository: str
    remote_url: str = ""
    remote_name: str = ""

    def __post_init__(self):
        if self.remote_url and parse_remote_url(self.remote_url) != self.repository:
            raise ValueError(
                f"repository {self.repository!r} does not match remote URL "
                f"{self.remote_url!r}"
            )

    def to_dict(self) -> dict:
        """Convert resolution to dictionary."""
        return {
            "directory": self.directory,
            "repository": self.repository,
            "remote_url": self.remote_url,
            "remote_name": self.remote_name,
        }


@dataclass(frozen=True)
class ByDirectory:
    """Target a repository through a local working copy."""

    path: str


@dataclass(frozen=True)
class ByRepository:
    """Target a repository by its explicit ``owner/repo`` name."""

    name: str


RepositoryTarget = Union[ByDirectory, ByRepository]
