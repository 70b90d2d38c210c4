"""Backend dialect detection.

Forgejo and Gitea share the ``/api/v1`` REST surface but differ in a few
response details. The dialect is either configured explicitly or detected
with a single probe of the ``/api/v1/version`` endpoint. Detection never
fails a tool call: a failed or inconclusive probe falls back to
``DEFAULT_DIALECT``.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from ..exceptions import InvalidDialectConfigError

logger = logging.getLogger(__name__)

VERSION_ENDPOINT = "/api/v1/version"
DEFAULT_PROBE_TIMEOUT = 10.0


class Dialect(str, Enum):
    """Configured backend dialect."""

    GITEA = "gitea"
    FORGEJO = "forgejo"
    AUTO = "auto"


ALLOWED_DIALECTS = tuple(d.value for d in Dialect)
DEFAULT_DIALECT = Dialect.GITEA

# Forgejo reports its Gitea compatibility level as a "+gitea-<version>" suffix
_GITEA_COMPAT_SUFFIX_RE = re.compile(r"\+gitea-\d")
_SEMVER_RE = re.compile(r"^v?(\d+)\.(\d+)")


@dataclass
class VersionInfo:
    """Response of the version endpoint."""

    version: str
    payload: Dict[str, Any] = field(default_factory=dict)


class ProbeError(Exception):
    """Exception raised when the version endpoint gives no usable answer."""

    pass


VersionProbeFn = Callable[[], Awaitable[VersionInfo]]


def parse_dialect(value: Union[str, Dialect, None]) -> Dialect:
    """Validate a configured dialect value.

    Empty or missing values mean ``auto``.

    Raises:
        InvalidDialectConfigError: If the value is not gitea, forgejo or auto
    """
    if isinstance(value, Dialect):
        return value
    if value is None or not value.strip():
        return Dialect.AUTO

    normalized = value.strip().lower()
    if normalized not in ALLOWED_DIALECTS:
        raise InvalidDialectConfigError(value, ALLOWED_DIALECTS)
    return Dialect(normalized)


def classify_version(info: VersionInfo) -> Optional[Dialect]:
    """Classify a version response, returning None when inconclusive."""
    version = (info.version or "").strip().lower()

    if "forgejo" in version or "forgejo" in info.payload:
        return Dialect.FORGEJO
    if _GITEA_COMPAT_SUFFIX_RE.search(version):
        return Dialect.FORGEJO

    match = _SEMVER_RE.match(version)
    if match:
        # Gitea is still on 1.x; Forgejo moved to its own majors at v7
        if int(match.group(1)) >= 2:
            return Dialect.FORGEJO
        return Dialect.GITEA

    if "gitea" in version:
        return Dialect.GITEA
    return None


class VersionProbe:
    """Single GET against a backend's version endpoint.

    Args:
        remote_url: Base URL of the Forgejo/Gitea instance
        auth_token: API token (optional for the version endpoint)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        remote_url: str,
        auth_token: Optional[str] = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ):
        self.remote_url = remote_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout

    def get_version_url(self) -> str:
        """Get full URL to the version endpoint."""
        return f"{self.remote_url}{VERSION_ENDPOINT}"

    def get_request_headers(self) -> Dict[str, str]:
        """Get request headers including auth when a token is set."""
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"token {self.auth_token}"
        return headers

    async def __call__(self) -> VersionInfo:
        """Call the version endpoint.

        Raises:
            ProbeError: On transport errors, non-200 status or bad payloads
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.get_version_url(), headers=self.get_request_headers()
                )
        except httpx.HTTPError as e:
            raise ProbeError(f"Failed to call version endpoint: {e}") from e

        if response.status_code != 200:
            raise ProbeError(
                f"Version endpoint returned status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProbeError(f"Failed to parse version response: {e}") from e

        if not isinstance(payload, dict) or not isinstance(
            payload.get("version"), str
        ):
            raise ProbeError(f"Unexpected version response: {payload!r}")

        return VersionInfo(version=payload["version"], payload=payload)


async def detect_dialect(
    config_value: Union[str, Dialect, None], probe: VersionProbeFn
) -> Dialect:
    """Determine the concrete dialect to speak for one tool call.

    Explicit ``gitea``/``forgejo`` values are returned without probing.
    ``auto`` awaits ``probe`` exactly once. Cancellation of the surrounding
    task propagates out of the probe unchanged.

    Args:
        config_value: Configured dialect (``auto`` when empty)
        probe: Coroutine function returning the backend's VersionInfo

    Returns:
        Dialect.GITEA or Dialect.FORGEJO
    """
    dialect = parse_dialect(config_value)
    if dialect is not Dialect.AUTO:
        return dialect

    try:
        info = await probe()
    except Exception as e:
        logger.warning(
            f"Dialect probe failed, falling back to {DEFAULT_DIALECT.value}: {e}"
        )
        return DEFAULT_DIALECT

    detected = classify_version(info)
    if detected is None:
        logger.warning(
            f"Could not classify backend version {info.version!r}, "
            f"falling back to {DEFAULT_DIALECT.value}"
        )
        return DEFAULT_DIALECT

    logger.debug(f"Detected {detected.value} backend from version {info.version!r}")
    return detected
