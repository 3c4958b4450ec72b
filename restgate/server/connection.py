"""Per-connection request/response state machine.

One ConnectionHandler drives exactly one accepted connection through:

    READING -> PARSING -> AUTHENTICATING -> DISPATCHING -> RESPONDING -> CLOSED

with ERROR_CLOSING reachable from the first four states. Every state change
goes through ConnectionHandler._transition(), and the full path taken is kept
in ConnectionHandler.history.

Outcomes:
    - Nothing received                       -> closed, no response
    - Oversized or delimiter-less request    -> 400
    - Missing or invalid Basic auth          -> 401 (handler not called)
    - Authenticated but empty body           -> 400 (handler not called)
    - Handler returned                       -> 200
    - Read failure, read/handler timeout,
      handler raised                         -> 500

The connection is closed in every case. No error escapes handle().
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Executor
from enum import Enum
from typing import Any

from restgate.core.constants import MAX_REQUEST_SIZE, READ_CHUNK_SIZE
from restgate.core.status import StatusCode
from restgate.server.auth import Credentials, check_basic_auth
from restgate.server.framing import frame_is_complete, parse_request_frame
from restgate.server.response import encode_response

AUTHORIZATION_HEADER = "Authorization"

RequestHandler = Callable[[bytes], Awaitable[None] | None]
"""Receives the body of each authenticated, non-empty request."""


class ConnectionState(Enum):
    """States of a single connection."""

    READING = "reading"
    PARSING = "parsing"
    AUTHENTICATING = "authenticating"
    DISPATCHING = "dispatching"
    RESPONDING = "responding"
    CLOSED = "closed"
    ERROR_CLOSING = "error_closing"


class _RequestTooLarge(Exception):
    def __init__(self, size: int) -> None:
        self.size = size
        super().__init__(f"Request too large: {size} bytes")


def _is_async_callable(func: Any) -> bool:
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


class ConnectionHandler:
    """Drive one accepted connection from first read to close.

    Instances are single-use: create one per accepted connection.

    Plain (non-async) request handlers run on a thread pool: `executor` when
    given, else the event loop's default executor. Either pool is bounded,
    so once every worker is stuck in a handler that never returns, further
    sync dispatches queue behind them. handler_timeout answers the waiting
    connection but cannot free the stuck worker, so use a coroutine handler
    when handlers may hang. RestServer passes its own pool so handler
    threads never compete with other to_thread() users.

    Example:
        handler = ConnectionHandler(credentials, on_body)
        status = await handler.handle(reader, writer)
    """

    def __init__(
        self,
        credentials: Credentials,
        request_handler: RequestHandler,
        *,
        chunk_size: int = READ_CHUNK_SIZE,
        max_request_size: int = MAX_REQUEST_SIZE,
        read_timeout: float | None = None,
        handler_timeout: float | None = None,
        executor: Executor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            credentials: The accepted Basic-Auth pair.
            request_handler: Called once with the body of an authenticated,
                non-empty request. Coroutine functions are awaited; plain
                callables run in a worker thread.
            chunk_size: Maximum bytes per socket read.
            max_request_size: Requests larger than this get a 400.
            read_timeout: Seconds allowed per read, or None for no limit.
            handler_timeout: Seconds allowed for request_handler, or None
                for no limit.
            executor: Thread pool for plain callables. None uses the
                loop's default executor.
            logger: Logger to use. Defaults to this module's logger.
        """
        self._credentials = credentials
        self._request_handler = request_handler
        self._chunk_size = chunk_size
        self._max_request_size = max_request_size
        self._read_timeout = read_timeout
        self._handler_timeout = handler_timeout
        self._executor = executor
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._state = ConnectionState.READING
        self._history: list[ConnectionState] = [ConnectionState.READING]
        self._peer: Any = None

    @property
    def state(self) -> ConnectionState:
        """Current state."""
        return self._state

    @property
    def history(self) -> list[ConnectionState]:
        """Every state entered so far, in order."""
        return list(self._history)

    def _transition(self, state: ConnectionState) -> None:
        self._logger.debug("Connection %s: %s -> %s", self._peer, self._state.value, state.value)
        self._state = state
        self._history.append(state)

    async def handle(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> StatusCode | None:
        """Run the full read/parse/auth/dispatch/respond cycle.

        Args:
            reader: Stream to read the request from.
            writer: Stream to write the response to. Always closed on return.

        Returns:
            The status sent to the client, or None if nothing was sent.
        """
        if self._history != [ConnectionState.READING]:
            raise RuntimeError("ConnectionHandler instances are single-use")

        self._peer = writer.get_extra_info("peername")
        try:
            try:
                status = await self._process(reader)
            except Exception as e:
                if self._state is ConnectionState.DISPATCHING:
                    self._logger.error(
                        "Request handler failed for %s: %s: %s",
                        self._peer, type(e).__name__, e,
                        exc_info=not isinstance(e, TimeoutError),
                    )
                else:
                    self._logger.warning(
                        "Connection %s failed while %s: %s: %s",
                        self._peer, self._state.value, type(e).__name__, e,
                    )
                self._transition(ConnectionState.ERROR_CLOSING)
                return await self._send_error(writer)

            if status is None:
                self._transition(ConnectionState.CLOSED)
                return None

            self._transition(ConnectionState.RESPONDING)
            try:
                await self._send(writer, status)
            except Exception as e:
                self._logger.debug("Failed to send response to %s: %s", self._peer, e)
                self._transition(ConnectionState.ERROR_CLOSING)
                return None

            self._transition(ConnectionState.CLOSED)
            return status
        finally:
            await self._close(writer)

    async def _process(self, reader: asyncio.StreamReader) -> StatusCode | None:
        """Steps READING through DISPATCHING. Returns the status to send."""
        try:
            buffer = await self._read_request(reader)
        except _RequestTooLarge as e:
            self._logger.info("Connection %s: %s", self._peer, e)
            return StatusCode.BAD_REQUEST

        self._transition(ConnectionState.PARSING)
        if not buffer:
            self._logger.debug("Connection %s closed without sending data", self._peer)
            return None

        request = parse_request_frame(buffer)
        if request is None:
            self._logger.info("Connection %s: malformed request (no header delimiter)", self._peer)
            return StatusCode.BAD_REQUEST

        self._transition(ConnectionState.AUTHENTICATING)
        auth_header = request.headers.get(AUTHORIZATION_HEADER)
        if not check_basic_auth(auth_header, self._credentials):
            reason = "missing" if auth_header is None else "invalid"
            self._logger.info("Connection %s: %s Authorization header", self._peer, reason)
            return StatusCode.UNAUTHORIZED

        self._transition(ConnectionState.DISPATCHING)
        if not request.body:
            self._logger.info("Connection %s: empty body", self._peer)
            return StatusCode.BAD_REQUEST

        await self._dispatch(request.body)
        return StatusCode.OK

    async def _read_request(self, reader: asyncio.StreamReader) -> bytes:
        """Accumulate reads until EOF or a complete frame has arrived."""
        buffer = bytearray()
        while True:
            if self._read_timeout is None:
                chunk = await reader.read(self._chunk_size)
            else:
                chunk = await asyncio.wait_for(
                    reader.read(self._chunk_size),
                    timeout=self._read_timeout,
                )
            if not chunk:
                break

            buffer.extend(chunk)
            if len(buffer) > self._max_request_size:
                raise _RequestTooLarge(len(buffer))
            if frame_is_complete(buffer):
                break

        return bytes(buffer)

    async def _dispatch(self, body: bytes) -> None:
        """Invoke the request handler once and wait for it to return.

        A timeout cancels the wait; a sync handler already running in its
        worker thread cannot be interrupted and finishes in the background.
        """
        self._logger.debug("Connection %s: dispatching %d body bytes", self._peer, len(body))

        if _is_async_callable(self._request_handler):
            call: Awaitable[Any] = self._request_handler(body)  # type: ignore[assignment]
        elif self._executor is None:
            call = asyncio.to_thread(self._request_handler, body)
        else:
            call = asyncio.get_running_loop().run_in_executor(
                self._executor, functools.partial(self._request_handler, body)
            )

        if self._handler_timeout is None:
            result = await call
        else:
            result = await asyncio.wait_for(call, timeout=self._handler_timeout)

        # A plain callable may still hand back an awaitable (e.g. a lambda
        # wrapping a coroutine function)
        if inspect.isawaitable(result):
            await result

    async def _send(self, writer: asyncio.StreamWriter, status: StatusCode) -> None:
        writer.write(encode_response(status))
        await writer.drain()
        self._logger.debug("Connection %s: sent %d %s", self._peer, status.value, status.phrase)

    async def _send_error(self, writer: asyncio.StreamWriter) -> StatusCode | None:
        """Best-effort 500. Returns None if the client is already gone."""
        if writer.is_closing():
            return None
        try:
            await self._send(writer, StatusCode.INTERNAL_SERVER_ERROR)
        except Exception as send_err:
            self._logger.debug(
                "Failed to send error response to %s (client disconnected?): %s",
                self._peer, send_err,
            )
            return None
        return StatusCode.INTERNAL_SERVER_ERROR

    async def _close(self, writer: asyncio.StreamWriter) -> None:
        try:
            writer.close()
            await writer.wait_closed()
        except Exception as close_err:
            self._logger.debug("Connection close failed (already closed?): %s", close_err)
