"""MCP protocol — Model Context Protocol server side."""

from weathernode.protocols.mcp.dispatcher import JsonRpcDispatcher, parse_request
from weathernode.protocols.mcp.models import (
    PROTOCOL_VERSION,
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    TextContent,
    ToolDescriptor,
    ToolErrorStyle,
    ToolResult,
)
from weathernode.protocols.mcp.tools import WEATHER_TOOLS, ToolRegistry, ToolSpec
from weathernode.protocols.mcp.transport import StreamServer, open_stdio_streams, serve_stdio

__all__ = [
    "PROTOCOL_VERSION",
    "WEATHER_TOOLS",
    "ErrorCode",
    "JsonRpcDispatcher",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "ServerInfo",
    "StreamServer",
    "TextContent",
    "ToolDescriptor",
    "ToolErrorStyle",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "open_stdio_streams",
    "parse_request",
    "serve_stdio",
]
