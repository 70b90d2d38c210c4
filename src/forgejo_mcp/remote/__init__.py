"""Forgejo/Gitea backend access: dialect detection and REST clients."""

from .client import (
    ForgeAPIError,
    ForgeClient,
    ForgejoClient,
    GiteaClient,
    client_for_dialect,
)
from .detection import (
    ALLOWED_DIALECTS,
    DEFAULT_DIALECT,
    Dialect,
    ProbeError,
    VersionInfo,
    VersionProbe,
    classify_version,
    detect_dialect,
    parse_dialect,
)

__all__ = [
    "ALLOWED_DIALECTS",
    "DEFAULT_DIALECT",
    "Dialect",
    "ForgeAPIError",
    "ForgeClient",
    "ForgejoClient",
    "GiteaClient",
    "ProbeError",
    "VersionInfo",
    "VersionProbe",
    "classify_version",
    "client_for_dialect",
    "detect_dialect",
    "parse_dialect",
]
