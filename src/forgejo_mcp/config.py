"""Configuration management for forgejo-mcp.

Configuration comes from environment variables, optionally overridden by
command line flags, and is validated once at startup. The resulting
``ServerConfig`` is passed explicitly to everything that needs it.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .remote.detection import Dialect, parse_dialect

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "info"
VALID_LOG_LEVELS = ["debug", "info", "warning", "error"]
MIN_TIMEOUT = 1
MAX_TIMEOUT = 300

ENV_VARS = {
    "remote_url": "FORGEJO_REMOTE_URL",
    "auth_token": "FORGEJO_AUTH_TOKEN",
    "client_type": "FORGEJO_CLIENT_TYPE",
    "compat_mode": "FORGEJO_COMPAT_MODE",
    "debug": "FORGEJO_DEBUG",
    "log_level": "FORGEJO_LOG_LEVEL",
    "timeout": "FORGEJO_TIMEOUT",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def mask_token(token: str) -> str:
    """Mask an auth token, showing only its last 4 characters."""
    if not token:
        return "Not set"
    if len(token) <= 4:
        return "****"
    return f"****{token[-4:]}"


def parse_bool(value: Any, env_var: str) -> bool:
    """Parse a boolean flag from an environment string."""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{env_var} must be a boolean (true/false). Got: {value!r}"
    )


class ServerConfig(BaseModel):
    """Configuration for the MCP server.

    Environment variable references are listed in ``ENV_VARS``.
    """

    model_config = ConfigDict(frozen=True)

    remote_url: str = Field(..., description="Base URL of the Forgejo/Gitea instance")
    auth_token: str = Field(..., description="API token for the instance")
    client_type: Dialect = Field(
        default=Dialect.AUTO, description="Backend dialect (gitea, forgejo, auto)"
    )
    compat_mode: bool = Field(
        default=False, description="Emit verbose per-item response text"
    )
    debug: bool = Field(default=False, description="Enable diagnostic-only tools")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Logging level")
    timeout: int = Field(
        default=DEFAULT_TIMEOUT, description="HTTP request timeout in seconds"
    )

    @field_validator("remote_url")
    @classmethod
    def validate_remote_url(cls, v: str) -> str:
        """Validate remote URL is an http(s) URL and strip trailing slashes."""
        v = v.strip()
        if not v:
            raise ValueError("remote_url cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"remote_url must use http or https. Got: {v}")
        return v.rstrip("/")

    @field_validator("auth_token")
    @classmethod
    def validate_auth_token(cls, v: str) -> str:
        """Validate auth token is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("auth_token cannot be empty")
        return v.strip()

    @field_validator("client_type", mode="before")
    @classmethod
    def validate_client_type(cls, v: Any) -> Dialect:
        return parse_dialect(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}. Got: {v}")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < MIN_TIMEOUT or v > MAX_TIMEOUT:
            raise ValueError(
                f"timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds. "
                f"Got: {v}"
            )
        return v

    def to_display_dict(self) -> Dict[str, Any]:
        """Configuration as a dictionary with the auth token masked."""
        data = self.model_dump()
        data["auth_token"] = mask_token(self.auth_token)
        data["client_type"] = self.client_type.value
        return data


def load_config(
    env: Optional[Mapping[str, str]] = None, **overrides: Any
) -> ServerConfig:
    """Load configuration from environment variables and overrides.

    Args:
        env: Environment mapping (default: ``os.environ``)
        **overrides: Field values taking precedence over the environment;
            ``None`` values are ignored

    Returns:
        Validated ServerConfig

    Raises:
        InvalidDialectConfigError: If FORGEJO_CLIENT_TYPE is not a known dialect
        ConfigurationError: If required values are missing or invalid
    """
    if env is None:
        env = os.environ

    config_data: Dict[str, Any] = {}
    for field_name, env_var in ENV_VARS.items():
        value = env.get(env_var)
        if value is not None and value.strip() != "":
            config_data[field_name] = value

    config_data.update({k: v for k, v in overrides.items() if v is not None})

    # The dialect is checked first so its error names the allowed set
    config_data["client_type"] = parse_dialect(config_data.get("client_type"))

    for field_name in ("remote_url", "auth_token"):
        if field_name not in config_data:
            raise ConfigurationError(
                f"Missing required field: {field_name}",
                f"set the {ENV_VARS[field_name]} environment variable",
            )

    for field_name in ("compat_mode", "debug"):
        if field_name in config_data:
            config_data[field_name] = parse_bool(
                config_data[field_name], ENV_VARS[field_name]
            )

    if "timeout" in config_data:
        try:
            config_data["timeout"] = int(config_data["timeout"])
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"{ENV_VARS['timeout']} must be an integer. "
                f"Got: {config_data['timeout']!r}"
            )

    try:
        return ServerConfig(**config_data)
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError("Invalid configuration", messages) from e
