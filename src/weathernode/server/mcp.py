"""``POST /mcp`` — the request/response MCP transport.

Every POST is admitted by the MCP rate limiter, validated as a JSON-RPC
envelope, then handed to the application's dispatcher. Requests with an
id always receive a JSON-RPC body with status 200; notifications receive
an empty 200.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from weathernode.protocols.errors import InvalidRequestError
from weathernode.protocols.mcp.dispatcher import parse_request
from weathernode.protocols.mcp.models import ErrorCode, JsonRpcResponse
from weathernode.server.middleware import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mcp"])


def _trim(message: Any) -> Any:
    """Strip surrounding whitespace from the envelope's top-level string fields."""
    if not isinstance(message, dict):
        return message
    return {
        key: value.strip() if isinstance(value, str) else value for key, value in message.items()
    }


def _parse_error(request_id: int | float | str | None, details: list[str]) -> JSONResponse:
    body = JsonRpcResponse.failure(request_id, ErrorCode.PARSE_ERROR, "Parse error", data=details)
    return JSONResponse(status_code=400, content=body.to_wire())


@router.post("/mcp", dependencies=[rate_limit("mcp_limiter")])
async def mcp_endpoint(request: Request) -> Response:
    """MCP protocol endpoint."""
    try:
        message = await request.json()
    except ValueError as exc:
        logger.info("Rejected undecodable MCP body: %s", exc)
        return _parse_error(None, ["Request body must be valid JSON"])

    try:
        rpc_request = parse_request(_trim(message))
    except InvalidRequestError as exc:
        return _parse_error(exc.request_id, exc.details)

    response = await request.app.state.dispatcher.dispatch(rpc_request)
    if response is None:
        return Response(status_code=200)
    return JSONResponse(content=response.to_wire())
