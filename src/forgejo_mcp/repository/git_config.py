"""Reading git remotes straight from ``.git/config``.

The configuration file is parsed as text so no git binary is required.
Only ``[remote "<name>"]`` sections and their ``url`` keys are of interest.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import NoRemotesConfiguredError
from .models import GitRemote

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"
CONFIG_FILE_NAME = "config"

_SECTION_RE = re.compile(
    r'^\[\s*(?P<section>[A-Za-z0-9.-]+)(?:\s+"(?P<subsection>(?:[^"\\]|\\.)*)")?\s*\](?P<rest>.*)$'
)
_KEY_RE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9-]*)\s*(?:=\s*(?P<value>.*))?$")


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def _parse_value(raw: str) -> str:
    """Parse a config value, honouring double quotes and trailing comments."""
    result = []
    in_quotes = False
    escaped = False
    for char in raw:
        if escaped:
            result.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif char in "#;" and not in_quotes:
            break
        else:
            result.append(char)
    return "".join(result).strip()


def _parse_section(line: str) -> Optional[Tuple[str, Optional[str], str]]:
    match = _SECTION_RE.match(line)
    if not match:
        return None

    section = match.group("section")
    subsection = match.group("subsection")
    if subsection is not None:
        subsection = _unescape(subsection)
    elif "." in section:
        # Legacy [remote.origin] syntax
        section, subsection = section.split(".", 1)
    return section.lower(), subsection, match.group("rest").strip()


def parse_remotes(text: str) -> List[GitRemote]:
    """Extract remotes from git configuration text in file order.

    Args:
        text: Contents of a git config file

    Returns:
        List of remotes that define a URL; the first ``url`` of a remote wins
    """
    urls: Dict[str, Optional[str]] = {}
    current_remote: Optional[str] = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#;":
            continue

        if line.startswith("["):
            parsed = _parse_section(line)
            if parsed is None:
                current_remote = None
                continue
            section, subsection, line = parsed
            if section == "remote" and subsection:
                current_remote = subsection
                urls.setdefault(current_remote, None)
            else:
                current_remote = None
            if not line:
                continue

        if current_remote is None:
            continue

        match = _KEY_RE.match(line)
        if not match or match.group("key").lower() != "url":
            continue

        value = _parse_value(match.group("value") or "")
        if value and urls.get(current_remote) is None:
            urls[current_remote] = value

    return [GitRemote(name=name, url=url) for name, url in urls.items() if url]


def read_remotes(directory: Union[str, Path]) -> List[GitRemote]:
    """Read the configured remotes of a git working copy.

    Args:
        directory: Root of the working copy (containing ``.git/``)

    Returns:
        Remotes in file order

    Raises:
        NoRemotesConfiguredError: If the configuration is missing, unreadable
            or defines no remote with a URL
    """
    config_path = Path(directory) / GIT_DIR_NAME / CONFIG_FILE_NAME
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read git config {config_path}: {e}")
        raise NoRemotesConfiguredError(str(directory))

    remotes = parse_remotes(text)
    if not remotes:
        raise NoRemotesConfiguredError(str(directory))

    logger.debug(f"Found remotes in {config_path}: {[r.name for r in remotes]}")
    return remotes
