"""JSON-RPC 2.0 message handling for the MCP server.

Incoming lines are parsed into ``JsonRpcRequest`` objects; outgoing
responses are plain dictionaries ready for ``json.dumps``. See
https://www.jsonrpc.org/specification for the message format.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
REQUEST_CANCELLED = -32800  # MCP/LSP request cancelled

JSONRPC_VERSION = "2.0"

RequestId = Union[int, str]


@dataclass(frozen=True)
class JsonRpcRequest:
    """Request or notification received from the client.

    Attributes:
        method: Method name to invoke
        id: Request identifier; None marks a notification
        params: Method parameters (empty when omitted)
    """

    method: str
    id: Optional[RequestId] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def from_dict(cls, data: Any) -> "JsonRpcRequest":
        """Validate a decoded message.

        Raises:
            ValueError: If the message is not a valid JSON-RPC 2.0 request
        """
        if not isinstance(data, dict):
            raise ValueError("Request must be a JSON object")
        if data.get("jsonrpc") != JSONRPC_VERSION:
            raise ValueError(
                f"Invalid jsonrpc version: {data.get('jsonrpc')!r} (expected '2.0')"
            )

        method = data.get("method")
        if not isinstance(method, str) or not method:
            raise ValueError("Missing required field: method")

        request_id = data.get("id")
        if request_id is not None and (
            isinstance(request_id, bool) or not isinstance(request_id, (int, str))
        ):
            raise ValueError("id must be a string or a number")

        params = data.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            raise ValueError("params must be an object")

        return cls(method=method, id=request_id, params=params)


def parse_message(line: str) -> JsonRpcRequest:
    """Parse one line of input.

    Raises:
        json.JSONDecodeError: If the line is not JSON
        ValueError: If the JSON is not a valid request
    """
    return JsonRpcRequest.from_dict(json.loads(line))


def success_response(request_id: Optional[RequestId], result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: Optional[RequestId],
    code: int,
    message: str,
    data: Optional[Any] = None,
) -> Dict[str, Any]:
    """Build an error response.

    MCP clients reject a null id, so callers pass 0 when the id of the
    failing message is unknown.
    """
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}
