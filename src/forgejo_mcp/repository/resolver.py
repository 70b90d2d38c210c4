"""Directory-to-repository resolution.

Resolution of a directory runs these steps, each failure being final:

1. the directory must exist (``DirectoryNotFoundError``)
2. it must contain a ``.git`` directory (``NotGitRepositoryError``)
3. ``.git/config`` must define a remote (``NoRemotesConfiguredError``)
4. ``origin`` is selected when present, else the first remote in file order
5. the selected URL must parse into owner/repo (``InvalidRemoteURLError``)
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Union

from ..exceptions import ArgumentValidationError
from .exceptions import DirectoryNotFoundError, NotGitRepositoryError
from .git_config import GIT_DIR_NAME, read_remotes
from .models import (
    ByDirectory,
    ByRepository,
    GitRemote,
    RepositoryResolution,
    RepositoryTarget,
)
from .url_parser import parse_remote_url

logger = logging.getLogger(__name__)

PREFERRED_REMOTE = "origin"
REPOSITORY_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+/[A-Za-z0-9._-]+$")
MISSING_TARGET_MESSAGE = "at least one of directory or repository must be provided"


def validate_directory(directory: Union[str, Path]) -> None:
    """Validate that a directory exists and is a git working copy root.

    Raises:
        DirectoryNotFoundError: If the path is missing or not a directory
        NotGitRepositoryError: If ``.git`` is missing or not a directory
    """
    path = Path(directory)
    if not path.is_dir():
        raise DirectoryNotFoundError(str(directory))

    git_dir = path / GIT_DIR_NAME
    if not git_dir.exists():
        raise NotGitRepositoryError(str(directory), "no .git directory found")
    if not git_dir.is_dir():
        raise NotGitRepositoryError(str(directory), ".git is not a directory")


def select_remote(remotes: List[GitRemote]) -> GitRemote:
    """Pick ``origin`` if configured, otherwise the first remote."""
    for remote in remotes:
        if remote.name == PREFERRED_REMOTE:
            return remote
    return remotes[0]


def target_from_arguments(
    directory: Optional[str] = None, repository: Optional[str] = None
) -> RepositoryTarget:
    """Build a repository target from raw tool arguments.

    Directory takes precedence when both arguments are given.

    Raises:
        ArgumentValidationError: If neither argument is provided, the
            directory is not absolute, or the repository is not ``owner/repo``
    """
    if directory:
        if not os.path.isabs(directory):
            raise ArgumentValidationError("directory must be an absolute path")
        if repository:
            logger.warning(
                f"Both directory and repository provided; using directory "
                f"{directory} and ignoring repository {repository}"
            )
        return ByDirectory(path=directory)

    if repository:
        if not REPOSITORY_NAME_RE.match(repository):
            raise ArgumentValidationError("repository must be in format 'owner/repo'")
        return ByRepository(name=repository)

    raise ArgumentValidationError(MISSING_TARGET_MESSAGE)


class RepositoryResolver:
    """Resolves directories and explicit names to repositories.

    Holds no state; every call reads the filesystem afresh.
    """

    def resolve_repository(self, directory: Union[str, Path]) -> RepositoryResolution:
        """Resolve a local working copy to its hosted repository.

        Args:
            directory: Root of the working copy

        Returns:
            RepositoryResolution for the selected remote

        Raises:
            RepositoryError: One of its subclasses, per resolution step
        """
        validate_directory(directory)
        remote = select_remote(read_remotes(directory))
        repository = parse_remote_url(remote.url)

        logger.debug(
            f"Resolved {directory} to {repository} via remote {remote.name}"
        )
        return RepositoryResolution(
            directory=str(directory),
            repository=repository,
            remote_url=remote.url,
            remote_name=remote.name,
        )

    def resolve(self, target: RepositoryTarget) -> RepositoryResolution:
        """Resolve a validated tool target."""
        if isinstance(target, ByDirectory):
            return self.resolve_repository(target.path)
        if isinstance(target, ByRepository):
            return RepositoryResolution(directory="", repository=target.name)
        raise TypeError(f"Unsupported repository target: {target!r}")
