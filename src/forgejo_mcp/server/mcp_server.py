"""MCP server speaking JSON-RPC 2.0 over stdio.

Reads newline-delimited requests from stdin and writes responses to stdout.
Each ``tools/call`` runs as its own asyncio task so that a later
``notifications/cancelled`` message can abort it.
"""

import asyncio
import json
import logging
import sys
from typing import Dict, Optional, Set, TextIO

from .. import __version__
from ..config import ServerConfig
from ..exceptions import ToolNotFoundError
from .protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    REQUEST_CANCELLED,
    JsonRpcRequest,
    RequestId,
    error_response,
    parse_message,
    success_response,
)
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"
SERVER_NAME = "forgejo-mcp"


class McpServer:
    """MCP server dispatching JSON-RPC requests to the tool registry.

    Args:
        config: Server configuration
        registry: Tool registry (default: built from config)
    """

    def __init__(self, config: ServerConfig, registry: Optional[ToolRegistry] = None):
        self.config = config
        self.registry = registry or ToolRegistry(config)
        self._in_flight: Dict[RequestId, asyncio.Task] = {}

    async def process_line(self, line: str) -> Optional[dict]:
        """Process a single line of input containing a JSON-RPC message.

        Args:
            line: JSON string containing a request or notification

        Returns:
            JSON-RPC response as dictionary, or None for notifications
        """
        try:
            request = parse_message(line)
        except json.JSONDecodeError as e:
            # MCP requires a string/number id; 0 is used when it is unknown
            return error_response(
                request_id=0,
                code=PARSE_ERROR,
                message="Parse error",
                data={"detail": str(e)},
            )
        except ValueError as e:
            return error_response(
                request_id=0,
                code=INVALID_REQUEST,
                message="Invalid Request",
                data={"detail": str(e)},
            )

        return await self.process_request(request)

    async def process_request(self, request: JsonRpcRequest) -> Optional[dict]:
        """Dispatch a parsed request.

        Returns:
            JSON-RPC response as dictionary, or None for notifications
        """
        if request.is_notification:
            self._handle_notification(request)
            return None

        params = request.params
        try:
            if request.method == "initialize":
                result = self._initialize()
            elif request.method == "ping":
                result = {}
            elif request.method == "tools/list":
                result = {"tools": self.registry.list_tools()}
            elif request.method == "tools/call":
                return await self._run_tool_call(request.id, params)
            else:
                return error_response(
                    request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}"
                )
        except Exception as e:
            logger.exception(f"Internal error handling {request.method}")
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {e}")

        return success_response(request.id, result)

    def _initialize(self) -> dict:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def _handle_notification(self, request: JsonRpcRequest) -> None:
        if request.method == "notifications/cancelled":
            request_id = request.params.get("requestId")
            task = (
                self._in_flight.get(request_id)
                if isinstance(request_id, (int, str))
                else None
            )
            if task is not None and not task.done():
                logger.info(f"Cancelling request {request_id}")
                task.cancel()
            return
        if request.method != "notifications/initialized":
            logger.debug(f"Ignoring notification {request.method}")

    async def _run_tool_call(self, request_id: RequestId, params: dict) -> dict:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return error_response(
                request_id, INVALID_PARAMS, "Invalid params: missing tool name"
            )
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return error_response(
                request_id, INVALID_PARAMS, "Invalid params: arguments must be an object"
            )

        task = asyncio.ensure_future(self.registry.call(name, arguments))
        self._in_flight[request_id] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            logger.info(f"Tool call {name} ({request_id}) cancelled")
            return error_response(request_id, REQUEST_CANCELLED, "Request cancelled")
        except ToolNotFoundError as e:
            return error_response(request_id, METHOD_NOT_FOUND, e.message)
        except Exception as e:
            logger.exception(f"Tool call {name} failed")
            return error_response(request_id, INTERNAL_ERROR, f"Internal error: {e}")
        finally:
            if self._in_flight.get(request_id) is task:
                del self._in_flight[request_id]

        return success_response(request_id, result.to_dict())

    async def _respond(self, line: str, stdout: TextIO) -> None:
        response = await self.process_line(line)
        if response is not None:
            stdout.write(json.dumps(response) + "\n")
            stdout.flush()

    async def run_stdio_loop(
        self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None
    ):
        """Run main stdio loop - read from stdin, write to stdout.

        Lines are read in a worker thread so in-flight calls keep running
        while the loop waits for the next message.

        Args:
            stdin: Input stream (default: sys.stdin)
            stdout: Output stream (default: sys.stdout)
        """
        if stdin is None:
            stdin = sys.stdin
        if stdout is None:
            stdout = sys.stdout

        loop = asyncio.get_running_loop()
        pending: Set[asyncio.Task] = set()
        try:
            while True:
                line = await loop.run_in_executor(None, stdin.readline)
                if not line:
                    break
                line = line.strip()
                if not line:
                    continue

                task = asyncio.ensure_future(self._respond(line, stdout))
                pending.add(task)
                task.add_done_callback(pending.discard)
                # Let the message register before reading the next one
                await asyncio.sleep(0)
        finally:
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def run(self):
        """Run server with default stdin/stdout."""
        logger.info(f"{SERVER_NAME} {__version__} listening on stdio")
        await self.run_stdio_loop()
