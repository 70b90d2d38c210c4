"""Unit tests for configuration loading and validation.

This module tests loading configuration from environment variables, command
line overrides, and validation of configuration values.
"""

import pytest

from forgejo_mcp.config import (
    DEFAULT_TIMEOUT,
    ServerConfig,
    load_config,
    mask_token,
)
from forgejo_mcp.exceptions import ConfigurationError, InvalidDialectConfigError
from forgejo_mcp.remote import Dialect

REQUIRED_ENV = {
    "FORGEJO_REMOTE_URL": "https://forge.example.com/",
    "FORGEJO_AUTH_TOKEN": "secret-token-1234",
}


def env_with(**values):
    env = dict(REQUIRED_ENV)
    env.update(values)
    return env


class TestLoadConfig:
    """Test loading configuration from the environment."""

    def test_defaults(self):
        config = load_config(env=REQUIRED_ENV)

        assert config.remote_url == "https://forge.example.com"
        assert config.auth_token == "secret-token-1234"
        assert config.client_type is Dialect.AUTO
        assert config.compat_mode is False
        assert config.debug is False
        assert config.log_level == "info"
        assert config.timeout == DEFAULT_TIMEOUT

    def test_all_variables(self):
        config = load_config(
            env=env_with(
                FORGEJO_CLIENT_TYPE="Forgejo",
                FORGEJO_COMPAT_MODE="yes",
                FORGEJO_DEBUG="1",
                FORGEJO_LOG_LEVEL="DEBUG",
                FORGEJO_TIMEOUT="60",
            )
        )

        assert config.client_type is Dialect.FORGEJO
        assert config.compat_mode is True
        assert config.debug is True
        assert config.log_level == "debug"
        assert config.timeout == 60

    def test_blank_client_type_means_auto(self):
        config = load_config(env=env_with(FORGEJO_CLIENT_TYPE="  "))

        assert config.client_type is Dialect.AUTO

    def test_overrides_take_precedence(self):
        config = load_config(
            env=env_with(FORGEJO_COMPAT_MODE="false"),
            compat_mode=True,
            client_type="gitea",
            log_level=None,
        )

        assert config.compat_mode is True
        assert config.client_type is Dialect.GITEA
        assert config.log_level == "info"

    @pytest.mark.parametrize("missing", ["FORGEJO_REMOTE_URL", "FORGEJO_AUTH_TOKEN"])
    def test_missing_required(self, missing):
        env = dict(REQUIRED_ENV)
        del env[missing]

        with pytest.raises(ConfigurationError, match=missing):
            load_config(env=env)

    def test_invalid_dialect(self):
        with pytest.raises(InvalidDialectConfigError, match="gitea, forgejo, auto"):
            load_config(env=env_with(FORGEJO_CLIENT_TYPE="github"))

    def test_invalid_dialect_reported_before_missing_values(self):
        with pytest.raises(InvalidDialectConfigError):
            load_config(env={"FORGEJO_CLIENT_TYPE": "github"})

    def test_invalid_boolean(self):
        with pytest.raises(ConfigurationError, match="FORGEJO_COMPAT_MODE"):
            load_config(env=env_with(FORGEJO_COMPAT_MODE="maybe"))

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError, match="FORGEJO_TIMEOUT"):
            load_config(env=env_with(FORGEJO_TIMEOUT="soon"))

    @pytest.mark.parametrize("timeout", ["0", "301"])
    def test_timeout_out_of_range(self, timeout):
        with pytest.raises(ConfigurationError, match="timeout"):
            load_config(env=env_with(FORGEJO_TIMEOUT=timeout))

    def test_non_http_url(self):
        with pytest.raises(ConfigurationError, match="http or https"):
            load_config(env=env_with(FORGEJO_REMOTE_URL="ftp://forge.example.com"))

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError, match="log_level"):
            load_config(env=env_with(FORGEJO_LOG_LEVEL="verbose"))


class TestServerConfig:
    """Test the configuration model."""

    def test_is_frozen(self):
        config = ServerConfig(remote_url="https://x.example.com", auth_token="t")

        with pytest.raises(Exception):
            config.debug = True

    def test_display_dict_masks_token(self):
        config = ServerConfig(
            remote_url="https://x.example.com", auth_token="secret-token-1234"
        )

        display = config.to_display_dict()

        assert display["auth_token"] == "****1234"
        assert display["client_type"] == "auto"


class TestMaskToken:
    """Test token masking."""

    def test_long_token(self):
        assert mask_token("abcdefgh") == "****efgh"

    def test_short_token(self):
        assert mask_token("abc") == "****"

    def test_empty_token(self):
        assert mask_token("") == "Not set"
