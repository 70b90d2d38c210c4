"""Repository resolution for forgejo-mcp.

Turns a caller-supplied target, either a local working copy or an explicit
``owner/repo`` name, into a validated canonical repository identifier.
"""

from .exceptions import (
    DirectoryNotFoundError,
    InvalidRemoteURLError,
    NoRemotesConfiguredError,
    NotGitRepositoryError,
    RepositoryError,
    ResolutionErrorKind,
)
from .git_config import read_remotes
from .models import (
    ByDirectory,
    ByRepository,
    GitRemote,
    RepositoryResolution,
    RepositoryTarget,
)
from .resolver import RepositoryResolver, target_from_arguments, validate_directory
from .url_parser import parse_remote_url

__all__ = [
    "ByDirectory",
    "ByRepository",
    "DirectoryNotFoundError",
    "GitRemote",
    "InvalidRemoteURLError",
    "NoRemotesConfiguredError",
    "NotGitRepositoryError",
    "RepositoryError",
    "RepositoryResolution",
    "RepositoryResolver",
    "RepositoryTarget",
    "ResolutionErrorKind",
    "parse_remote_url",
    "read_remotes",
    "target_from_arguments",
    "validate_directory",
]
