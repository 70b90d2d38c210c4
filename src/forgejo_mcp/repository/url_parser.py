"""Parsing of git remote URLs into ``owner/repo`` identifiers.

Supported forms:

- ``https://host[:port]/owner/repo[.git]`` (also ``http``, ``git`` and
  ``ssh`` schemes, with optional ``user@`` in the authority)
- ``user@host:owner/repo[.git]`` (scp-like SSH shorthand)

Owner and repository are the last two non-empty path segments. Parsing is
pure string processing; no network or filesystem access takes place. A
single-letter scp host is a Windows drive, so ``C:/path`` is rejected.
"""

from typing import List, Optional, Tuple
from urllib.parse import urlparse

from .exceptions import InvalidRemoteURLError

GIT_SUFFIX = ".git"


def _split_scheme_url(url: str) -> Optional[Tuple[str, str]]:
    """Split ``scheme://authority/path`` into (host, path)."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return None

    if not parsed.scheme or not host:
        return None
    return host, parsed.path


def _split_scp_url(url: str) -> Optional[Tuple[str, str]]:
    """Split ``[user@]host:path`` into (host, path)."""
    prefix, colon, path = url.partition(":")
    if not colon or "/" in prefix:
        return None
    if len(prefix) == 1 and prefix.isalpha():
        return None

    host = prefix.rpartition("@")[2]
    return host, path


def _path_segments(path: str) -> List[str]:
    # Query strings and fragments never belong to the repository path
    path = path.split("?", 1)[0].split("#", 1)[0]
    return [segment for segment in path.split("/") if segment]


def parse_remote_url(url: str) -> str:
    """Parse a git remote URL into a canonical ``owner/repo`` string.

    Args:
        url: Remote URL exactly as configured

    Returns:
        str: ``owner/repo`` with case preserved and ``.git`` stripped

    Raises:
        InvalidRemoteURLError: If the URL does not yield an owner and a
            repository segment
    """
    if not isinstance(url, str):
        raise InvalidRemoteURLError(str(url))

    candidate = url.strip()
    if "://" in candidate:
        parts = _split_scheme_url(candidate)
    else:
        parts = _split_scp_url(candidate)

    if parts is None:
        raise InvalidRemoteURLError(url)

    host, path = parts
    if not host:
        raise InvalidRemoteURLError(url)

    segments = _path_segments(path)
    if len(segments) < 2:
        raise InvalidRemoteURLError(url)

    owner, repo = segments[-2], segments[-1]
    if repo.endswith(GIT_SUFFIX):
        repo = repo[: -len(GIT_SUFFIX)]

    if not owner or not repo:
        raise InvalidRemoteURLError(url)

    return f"{owner}/{repo}"
