"""
Forgejo MCP - repository management tools for Forgejo and Gitea over MCP.

Exposes issues, pull requests, comments and notifications of a Forgejo or
Gitea instance to an MCP client through JSON-RPC 2.0 over stdio.
"""

__version__ = "1.0.0"
