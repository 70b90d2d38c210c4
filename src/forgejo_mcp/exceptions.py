"""Exception classes shared across forgejo-mcp."""

from typing import Optional


class ForgejoMCPError(Exception):
    """Base exception for forgejo-mcp errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(ForgejoMCPError, ValueError):
    """Exception raised when server configuration is missing or invalid."""

    pass


class InvalidDialectConfigError(ConfigurationError):
    """Exception raised when the configured backend dialect is unknown."""

    def __init__(self, value: str, allowed: tuple):
        super().__init__(
            f"Invalid client type {value!r}: must be one of {', '.join(allowed)}"
        )
        self.value = value
        self.allowed = allowed


class ArgumentValidationError(ForgejoMCPError, ValueError):
    """Exception raised when tool arguments fail validation."""

    pass


class ToolNotFoundError(ForgejoMCPError):
    """Exception raised when a tool name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name
