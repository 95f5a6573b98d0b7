"""Shared error types for the protocol layer.

Each error maps onto one JSON-RPC error code; the dispatcher turns them
into structured responses and never lets them reach the transport.
"""

from __future__ import annotations

from typing import Any


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""

    code: int = -32603


class InvalidRequestError(ProtocolError):
    """The inbound message is not a valid JSON-RPC 2.0 envelope."""

    code = -32700

    def __init__(
        self, details: list[str] | None = None, request_id: int | float | str | None = None
    ) -> None:
        self.details = details or []
        self.request_id = request_id
        super().__init__("Parse error")


class MethodNotFoundError(ProtocolError):
    """The requested JSON-RPC method is not routed by the dispatcher."""

    code = -32601

    def __init__(self, method: Any) -> None:
        self.method = method
        super().__init__("Method not found")


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolExecutionError(ProtocolError):
    """A tool invocation failed: unknown tool, empty backend result, or backend error."""

    def __init__(self, name: Any, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {detail}" if detail else "Tool execution failed")
