"""MCP server: protocol handling, tools and response formatting."""

from .formatting import format_result
from .mcp_server import McpServer
from .tools import Tool, ToolRegistry, ToolResult, describe_resolution_error

__all__ = [
    "McpServer",
    "Tool",
    "ToolRegistry",
    "ToolResult",
    "describe_resolution_error",
    "format_result",
]
