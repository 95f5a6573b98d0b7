"""Protocol layer: JSON-RPC error taxonomy and the MCP server."""

from weathernode.protocols.errors import (
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)

__all__ = [
    "InvalidRequestError",
    "MethodNotFoundError",
    "ProtocolError",
    "ToolExecutionError",
    "ToolNotFoundError",
]
