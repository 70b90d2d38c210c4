"""Exception classes for repository resolution.

Every failure of directory-to-repository resolution is one of the classes
below. Each carries a ``kind`` so calling code can branch on the failure
without inspecting message text.
"""

from enum import Enum


class ResolutionErrorKind(str, Enum):
    """Closed set of repository resolution failure kinds."""

    DIRECTORY_NOT_FOUND = "directory_not_found"
    NOT_GIT_REPOSITORY = "not_git_repository"
    NO_REMOTES_CONFIGURED = "no_remotes_configured"
    INVALID_REMOTE_URL = "invalid_remote_url"


class RepositoryError(Exception):
    """Base exception for repository resolution errors."""

    kind: ResolutionErrorKind

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self):
        return self.message

    def __eq__(self, other):
        if not isinstance(other, RepositoryError):
            return NotImplemented
        return self.kind == other.kind and self.path == other.path

    def __hash__(self):
        return hash((self.kind, self.path))


class DirectoryNotFoundError(RepositoryError):
    """Raised when a path does not exist or is not a directory."""

    kind = ResolutionErrorKind.DIRECTORY_NOT_FOUND

    def __init__(self, path: str):
        super().__init__(f"directory does not exist: {path}", path)


class NotGitRepositoryError(RepositoryError):
    """Raised when a directory has no usable .git metadata directory."""

    kind = ResolutionErrorKind.NOT_GIT_REPOSITORY

    def __init__(self, path: str, reason: str = "no .git directory found"):
        super().__init__(f"not a git repository: {path} ({reason})", path)
        self.reason = reason


class NoRemotesConfiguredError(RepositoryError):
    """Raised when git metadata defines no remote with a URL."""

    kind = ResolutionErrorKind.NO_REMOTES_CONFIGURED

    def __init__(self, path: str):
        super().__init__(f"no git remotes configured in {path}", path)


class InvalidRemoteURLError(RepositoryError):
    """Raised when a remote URL cannot be decomposed into owner/repo."""

    kind = ResolutionErrorKind.INVALID_REMOTE_URL

    def __init__(self, url: str):
        super().__init__(f"failed to parse remote URL: {url}", url)
        self.url = url
