"""MCP stream transport — serves JSON-RPC over newline-delimited JSON streams.

One :class:`StreamServer` owns one dispatcher for the lifetime of a
connection (stdin/stdout for ``weathernode stdio``). Each inbound line is
handled in its own task so a slow provider call does not hold up other
messages; outbound writes are serialized.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Protocol

from weathernode.protocols.mcp.models import ErrorCode, JsonRpcResponse, readable_id

if TYPE_CHECKING:
    from weathernode.protocols.mcp.dispatcher import JsonRpcDispatcher
    from weathernode.runtime.models import AdmissionDecision
    from weathernode.runtime.ratelimit import SlidingWindowLimiter

logger = logging.getLogger(__name__)

STREAM_LIMIT = 10 * 1024 * 1024


class MessageWriter(Protocol):
    """The subset of :class:`asyncio.StreamWriter` the server writes through."""

    def write(self, data: bytes) -> None: ...
    async def drain(self) -> None: ...


class StreamServer:
    """Serves one JSON-RPC connection over a reader/writer pair.

    Usage::

        reader, writer = await open_stdio_streams()
        await StreamServer(dispatcher, reader, writer).serve()

    When *limiter* is given every inbound message is checked against it
    under *client_key* before dispatch.
    """

    def __init__(
        self,
        dispatcher: JsonRpcDispatcher,
        reader: asyncio.StreamReader,
        writer: MessageWriter,
        *,
        limiter: SlidingWindowLimiter | None = None,
        client_key: str = "stdio",
    ) -> None:
        self._dispatcher = dispatcher
        self._reader = reader
        self._writer = writer
        self._limiter = limiter
        self._client_key = client_key
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    async def serve(self) -> None:
        """Read lines until EOF, then wait for in-flight messages to finish.

        A line longer than the reader's limit is answered with a parse error
        and skipped; the connection keeps going.
        """
        try:
            while True:
                try:
                    line = await self._reader.readline()
                except ValueError as exc:
                    logger.warning("Discarding oversized line: %s", exc)
                    response = self._parse_error(self._admit(), str(exc))
                    if response is not None:
                        await self._send(response)
                    continue
                if not line:
                    break
                if not line.strip():
                    continue
                task = asyncio.create_task(self._process(line))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        finally:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("Stream closed")

    async def handle_line(self, line: bytes | str) -> JsonRpcResponse | None:
        """Admit, decode and dispatch a single line.

        Every line counts against the limiter, including ones that fail to
        decode.
        """
        decision = self._admit()
        try:
            message: Any = json.loads(line)
        except ValueError as exc:
            logger.info("Discarding undecodable line: %s", exc)
            return self._parse_error(decision, str(exc))

        if decision is not None and not decision.allowed:
            request_id = readable_id(message)
            if request_id is None:
                return None
            return JsonRpcResponse.failure(
                request_id,
                ErrorCode.RATE_LIMITED,
                "Rate limit exceeded",
                data={"retryAfter": decision.retry_after},
            )

        return await self._dispatcher.handle(message)

    def _admit(self) -> AdmissionDecision | None:
        if self._limiter is None:
            return None
        decision = self._limiter.check(self._client_key)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s, retry after %ds",
                self._client_key,
                decision.retry_after,
            )
        return decision

    @staticmethod
    def _parse_error(decision: AdmissionDecision | None, detail: str) -> JsonRpcResponse | None:
        # Denied unreadable lines have no id to answer.
        if decision is not None and not decision.allowed:
            return None
        return JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error", data=[detail])

    async def _process(self, line: bytes) -> None:
        try:
            response = await self.handle_line(line)
            if response is not None:
                await self._send(response)
        except Exception:
            logger.exception("Failed to process stream message")

    async def _send(self, response: JsonRpcResponse) -> None:
        data = (json.dumps(response.to_wire(), ensure_ascii=False) + "\n").encode()
        async with self._write_lock:
            self._writer.write(data)
            await self._writer.drain()


async def open_stdio_streams(
    limit: int = STREAM_LIMIT,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process's stdin/stdout as asyncio streams."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    transport, protocol = await loop.connect_write_pipe(
        asyncio.streams.FlowControlMixin, sys.stdout
    )
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer


async def serve_stdio(
    dispatcher: JsonRpcDispatcher,
    *,
    limiter: SlidingWindowLimiter | None = None,
) -> None:
    """Serve MCP on stdin/stdout until stdin closes."""
    reader, writer = await open_stdio_streams()
    logger.info("MCP server running on stdio")
    await StreamServer(dispatcher, reader, writer, limiter=limiter).serve()
