"""JsonRpcDispatcher — turns one JSON-RPC request into zero or one response.

The dispatcher is stateless per call. It routes by method name through a
fixed table, delegates ``tools/call`` to a :class:`ToolRegistry`, and
recovers every routing and tool failure into a structured error
response. Notifications never produce a response.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from weathernode import __version__
from weathernode.protocols.errors import (
    InvalidRequestError,
    MethodNotFoundError,
    ToolExecutionError,
)
from weathernode.protocols.mcp.models import (
    PROTOCOL_VERSION,
    ErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    ToolErrorStyle,
    ToolResult,
    readable_id,
)
from weathernode.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_METHOD,
    ATTR_RPC_NOTIFICATION,
    get_tracer,
)

if TYPE_CHECKING:
    from weathernode.protocols.mcp.tools import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_SERVER_NAME = "weathernode"

MethodHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def parse_request(message: Any) -> JsonRpcRequest:
    """Validate a decoded message as a JSON-RPC 2.0 request envelope.

    Raises:
        InvalidRequestError: The message is not an object or fails validation.
            ``request_id`` carries the message's id when it is readable.
    """
    if not isinstance(message, dict):
        raise InvalidRequestError(["message must be a JSON object"])
    try:
        return JsonRpcRequest.model_validate(message)
    except ValidationError as exc:
        details = [
            f"{'.'.join(str(part) for part in err['loc']) or 'message'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidRequestError(details, readable_id(message)) from exc


class JsonRpcDispatcher:
    """Method-routed handler for MCP JSON-RPC messages.

    Usage::

        dispatcher = JsonRpcDispatcher(ToolRegistry(provider))
        request = JsonRpcRequest(jsonrpc="2.0", id=1, method="tools/list")
        response = await dispatcher.dispatch(request)
        if response is not None:
            send(response.to_wire())

    *tool_errors* selects how failed tool invocations are reported:
    :attr:`ToolErrorStyle.ERROR` returns a top-level ``-32603`` error,
    :attr:`ToolErrorStyle.RESULT` returns a result flagged ``isError``.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        server_info: ServerInfo | None = None,
        tool_errors: ToolErrorStyle | str = ToolErrorStyle.ERROR,
    ) -> None:
        self._registry = registry
        self._server_info = server_info or ServerInfo(name=DEFAULT_SERVER_NAME, version=__version__)
        self._tool_errors = ToolErrorStyle(tool_errors)
        self._routes: dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def tool_errors(self) -> ToolErrorStyle:
        return self._tool_errors

    @property
    def methods(self) -> list[str]:
        return list(self._routes)

    async def handle(self, message: Any) -> JsonRpcResponse | None:
        """Validate a decoded message, then dispatch it.

        Malformed envelopes yield a ``-32700`` error response (with a null id
        when the id is unreadable).
        """
        try:
            request = parse_request(message)
        except InvalidRequestError as exc:
            logger.info("Rejected malformed JSON-RPC message: %s", "; ".join(exc.details))
            return JsonRpcResponse.failure(
                exc.request_id, ErrorCode.PARSE_ERROR, str(exc), data=exc.details
            )
        return await self.dispatch(request)

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Produce the response for *request*, or ``None`` for a notification."""
        with _tracer.start_as_current_span("mcp.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_RPC_NOTIFICATION, request.is_notification)

            if request.is_notification:
                logger.debug("Notification %s acknowledged", request.method)
                return None

            response = await self._respond(request)
            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def _respond(self, request: JsonRpcRequest) -> JsonRpcResponse:
        request_id = request.id
        try:
            handler = self._routes.get(request.method)
            if handler is None:
                raise MethodNotFoundError(request.method)
            result = await handler(request.params or {})
        except MethodNotFoundError as exc:
            logger.info("Method not found: %s", exc.method)
            return JsonRpcResponse.failure(request_id, ErrorCode.METHOD_NOT_FOUND, str(exc))
        except ToolExecutionError as exc:
            return self._tool_failure(request_id, exc)
        except Exception as exc:
            logger.exception("Internal error handling %s", request.method)
            return JsonRpcResponse.failure(
                request_id, ErrorCode.INTERNAL_ERROR, f"Internal error: {exc}"
            )
        return JsonRpcResponse.success(request_id, result)

    def _tool_failure(
        self, request_id: int | float | str | None, exc: ToolExecutionError
    ) -> JsonRpcResponse:
        if self._tool_errors is ToolErrorStyle.RESULT:
            return JsonRpcResponse.success(
                request_id, ToolResult.from_error(f"Error: {exc.detail}").to_wire()
            )
        return JsonRpcResponse.failure(request_id, ErrorCode.INTERNAL_ERROR, str(exc))

    # -- method handlers -----------------------------------------------------

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": self._server_info.model_dump(),
        }

    async def _tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": self._registry.list_tools()}

    async def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            msg = "tools/call arguments must be an object"
            raise TypeError(msg)
        result = await self._registry.call(params.get("name"), arguments)
        return result.to_wire()
