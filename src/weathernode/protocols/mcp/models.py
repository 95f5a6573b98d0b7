"""MCP models — JSON-RPC 2.0 messages and tool payloads.

Implements the message format served by ``POST /mcp`` and the stdio
transport: the request/response envelope, error objects, tool
descriptors returned by ``tools/list`` and the content envelope returned
by ``tools/call``.
"""

from __future__ import annotations

import math
from enum import Enum, IntEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

PROTOCOL_VERSION = "2024-11-05"

RequestId = StrictInt | Annotated[float, Field(strict=True, allow_inf_nan=False)] | StrictStr


def readable_id(message: Any) -> int | float | str | None:
    """Return *message*'s ``id`` when it is a usable request id, else ``None``."""
    if not isinstance(message, dict):
        return None
    raw_id = message.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, float, str)):
        return None
    if isinstance(raw_id, float) and not math.isfinite(raw_id):
        return None
    return raw_id


class ErrorCode(IntEnum):
    """JSON-RPC error codes used on the wire."""

    PARSE_ERROR = -32700
    METHOD_NOT_FOUND = -32601
    INTERNAL_ERROR = -32603
    RATE_LIMITED = -32002


class ToolErrorStyle(str, Enum):
    """How a failed ``tools/call`` is reported to the caller."""

    ERROR = "error"
    RESULT = "result"


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification.

    A message without an ``id`` (or with ``id: null``) is a notification
    and never receives a response body.
    """

    jsonrpc: Literal["2.0"]
    id: RequestId | None = None
    method: str = Field(..., min_length=1)
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying exactly one of ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId | None = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "a response carries exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(
        cls, request_id: int | float | str | None, result: dict[str, Any]
    ) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: int | float | str | None,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the wire shape; ``id`` is always present, even when null."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.to_wire()
        else:
            payload["result"] = self.result
        return payload


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    """Static server identity reported by ``initialize``."""

    name: str
    version: str


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TextContent(BaseModel):
    """A single text part of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """The content envelope every ``tools/call`` produces."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def from_text(cls, text: str) -> ToolResult:
        return cls(content=[TextContent(text=text)])

    @classmethod
    def from_error(cls, text: str) -> ToolResult:
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.content)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
