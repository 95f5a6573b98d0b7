"""Tests for the protocol error taxonomy."""

from __future__ import annotations

from weathernode.protocols.errors import (
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)


class TestProtocolErrors:
    def test_hierarchy(self) -> None:
        for exc in (
            InvalidRequestError(),
            MethodNotFoundError("x"),
            ToolNotFoundError("x"),
            ToolExecutionError("x", "boom"),
        ):
            assert isinstance(exc, ProtocolError)

    def test_codes(self) -> None:
        assert InvalidRequestError.code == -32700
        assert MethodNotFoundError.code == -32601
        assert ToolExecutionError.code == -32603

    def test_invalid_request_carries_details_and_id(self) -> None:
        exc = InvalidRequestError(["method: Field required"], request_id=4)
        assert str(exc) == "Parse error"
        assert exc.details == ["method: Field required"]
        assert exc.request_id == 4

    def test_method_not_found_message(self) -> None:
        exc = MethodNotFoundError("resources/list")
        assert str(exc) == "Method not found"
        assert exc.method == "resources/list"

    def test_tool_not_found_message(self) -> None:
        assert str(ToolNotFoundError("nope")) == "Unknown tool: nope"

    def test_tool_execution_message(self) -> None:
        exc = ToolExecutionError("get_weather", "Unknown tool: nope")
        assert str(exc) == "Tool execution failed: Unknown tool: nope"
        assert exc.detail == "Unknown tool: nope"

    def test_tool_execution_without_detail(self) -> None:
        assert str(ToolExecutionError("get_weather")) == "Tool execution failed"
