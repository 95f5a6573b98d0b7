"""Tests for MCP JSON-RPC models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from weathernode.protocols.mcp.models import (
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDescriptor,
    ToolResult,
    readable_id,
)


class TestJsonRpcRequest:
    def test_request_with_id(self) -> None:
        req = JsonRpcRequest(jsonrpc="2.0", id=1, method="tools/list")
        assert req.id == 1
        assert req.params is None
        assert not req.is_notification

    def test_string_id(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": "abc", "method": "x"})
        assert req.id == "abc"

    def test_missing_id_is_notification(self) -> None:
        payload = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        req = JsonRpcRequest.model_validate(payload)
        assert req.is_notification

    def test_null_id_is_notification(self) -> None:
        # A null id is not a parse error here.
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": None, "method": "x"})
        assert req.is_notification

    def test_requires_jsonrpc_version(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"id": 1, "method": "x"})

    def test_rejects_wrong_version(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "1.0", "id": 1, "method": "x"})

    def test_rejects_empty_method(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 1, "method": ""})

    def test_rejects_non_object_params(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate(
                {"jsonrpc": "2.0", "id": 1, "method": "x", "params": [1, 2]}
            )

    def test_rejects_bool_id(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": True, "method": "x"})

    def test_float_id_keeps_its_type(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 1.0, "method": "x"})
        assert isinstance(req.id, float)
        assert req.id == 1.0

    def test_int_id_stays_int(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 3, "method": "x"})
        assert type(req.id) is int

    def test_rejects_non_finite_id(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": float("nan"), "method": "x"})


class TestReadableId:
    @pytest.mark.parametrize("raw_id", [7, 2.5, "abc"])
    def test_usable_ids(self, raw_id: object) -> None:
        assert readable_id({"id": raw_id}) == raw_id

    @pytest.mark.parametrize("raw_id", [None, True, float("inf"), [1], {"a": 1}])
    def test_unusable_ids(self, raw_id: object) -> None:
        assert readable_id({"id": raw_id}) is None

    def test_non_object_message(self) -> None:
        assert readable_id([1, 2]) is None


class TestJsonRpcResponse:
    def test_success_wire_shape(self) -> None:
        resp = JsonRpcResponse.success(7, {"ok": True})
        assert resp.to_wire() == {"jsonrpc": "2.0", "id": 7, "result": {"ok": True}}

    def test_failure_wire_shape_omits_null_data(self) -> None:
        resp = JsonRpcResponse.failure("a", ErrorCode.METHOD_NOT_FOUND, "Method not found")
        assert resp.to_wire() == {
            "jsonrpc": "2.0",
            "id": "a",
            "error": {"code": -32601, "message": "Method not found"},
        }

    def test_failure_with_data(self) -> None:
        resp = JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error", data=["bad"])
        wire = resp.to_wire()
        assert wire["id"] is None
        assert wire["error"]["data"] == ["bad"]

    def test_null_id_is_always_serialized(self) -> None:
        wire = JsonRpcResponse.success(None, {}).to_wire()
        assert "id" in wire
        assert wire["id"] is None

    def test_rejects_both_result_and_error(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1, result={}, error=JsonRpcError(code=-32603, message="x"))

    def test_rejects_neither_result_nor_error(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1)


class TestErrorCode:
    def test_wire_values(self) -> None:
        assert ErrorCode.PARSE_ERROR == -32700
        assert ErrorCode.METHOD_NOT_FOUND == -32601
        assert ErrorCode.INTERNAL_ERROR == -32603
        assert ErrorCode.RATE_LIMITED == -32002


class TestToolDescriptor:
    def test_wire_uses_camel_case_schema(self) -> None:
        desc = ToolDescriptor(name="t", description="d", input_schema={"type": "object"})
        assert desc.to_wire() == {
            "name": "t",
            "description": "d",
            "inputSchema": {"type": "object"},
        }

    def test_accepts_alias(self) -> None:
        desc = ToolDescriptor.model_validate({"name": "t", "inputSchema": {"type": "object"}})
        assert desc.input_schema == {"type": "object"}

    def test_frozen(self) -> None:
        desc = ToolDescriptor(name="t")
        with pytest.raises(ValidationError):
            desc.name = "other"  # type: ignore[misc]


class TestToolResult:
    def test_from_text_omits_is_error(self) -> None:
        result = ToolResult.from_text("hello")
        assert result.to_wire() == {"content": [{"type": "text", "text": "hello"}]}

    def test_from_error_sets_flag(self) -> None:
        result = ToolResult.from_error("Error: boom")
        assert result.to_wire() == {
            "content": [{"type": "text", "text": "Error: boom"}],
            "isError": True,
        }

    def test_text_joins_parts(self) -> None:
        result = ToolResult.model_validate(
            {"content": [{"type": "text", "text": "a"}, {"type": "text", "text": "b"}]}
        )
        assert result.text == "a\nb"
