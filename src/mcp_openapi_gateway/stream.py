#!/usr/bin/env python3
# src/mcp_openapi_gateway/stream.py
"""
Stream - stateless task tokens and the WebSocket invocation session

A task token *is* the invocation: a versioned StreamInvocation record,
JSON-encoded and base64'd, held by the client. There is no server-side
session table.

Session protocol (one invocation per socket):

    progress {percent: 0,  status: "starting"}
    progress {percent: 30, status: "fetching"}
    ... upstream call ...
    progress {percent: 70, status: "processing"}
    complete {type: "data", model, output}

Any failure emits ``error {message}``; a client ``{"type": "cancel"}``
emits ``cancelled`` and aborts the in-flight call. Every terminal event is
followed by closing the socket.
"""

import asyncio
import base64
import binascii
import contextlib
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import orjson
from pydantic import BaseModel, Field, ValidationError

from .errors import StreamTokenDecodeError
from .executor import CallExecutor
from .invocation import invoke_tool
from .models import Catalog

logger = logging.getLogger(__name__)

TOKEN_VERSION = 1

MSG_INVALID_TOKEN = "Invalid task ID format"
MSG_MODEL_NOT_FOUND = "Model not found"
MSG_TOOL_NOT_FOUND = "Tool not specified or not found"
MSG_CANCELLED = "Task cancelled by client"


# ============================================================================
# Task tokens
# ============================================================================


class StreamInvocation(BaseModel):
    """Everything needed to perform one streamed invocation."""

    v: int = Field(default=TOKEN_VERSION, description="Token schema version")
    model: str | None = None
    tool: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)

    def encode(self) -> str:
        """Serialize to an opaque, URL-safe task token."""
        payload = orjson.dumps(self.model_dump())
        return base64.urlsafe_b64encode(payload).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "StreamInvocation":
        """Parse a task token.

        Tokens without a ``v`` field predate versioning and are read as version 1.

        Raises:
            StreamTokenDecodeError: The token is not valid base64 JSON of a known version.
        """
        try:
            padded = token + "=" * (-len(token) % 4)
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
            data = orjson.loads(raw)
        except (binascii.Error, ValueError) as e:
            raise StreamTokenDecodeError() from e

        if not isinstance(data, dict):
            raise StreamTokenDecodeError()
        if data.get("v", TOKEN_VERSION) != TOKEN_VERSION:
            raise StreamTokenDecodeError(f"Unsupported task token version: {data.get('v')}")

        try:
            return cls.model_validate({**data, "parameters": data.get("parameters") or {}})
        except ValidationError as e:
            raise StreamTokenDecodeError() from e


def create_task_token(model: str | None, tool: str | None, parameters: dict[str, Any] | None) -> str:
    return StreamInvocation(model=model, tool=tool, parameters=parameters or {}).encode()


# ============================================================================
# Session
# ============================================================================


class StreamState(str, Enum):
    CONNECTING = "connecting"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({StreamState.COMPLETED, StreamState.ERRORED, StreamState.CANCELLED})


def stream_event(event: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"type": "event", "event": event, "data": data}


SendFn = Callable[[dict[str, Any]], Awaitable[None]]
ReceiveFn = Callable[[], Awaitable[str | None]]
CloseFn = Callable[[], Awaitable[None]]


class StreamSession:
    """Runs a single streamed invocation over an abstract message channel.

    ``receive`` returns the next inbound text frame, or None once the client
    has gone away. Transport specifics live in ``endpoints.stream``.
    """

    def __init__(
        self,
        catalog: Catalog,
        executor: CallExecutor,
        token: str,
        send: SendFn,
        receive: ReceiveFn,
        close: CloseFn,
    ):
        self.catalog = catalog
        self.executor = executor
        self.token = token
        self._send = send
        self._receive = receive
        self._close = close
        self.state = StreamState.CONNECTING
        self.invocation: StreamInvocation | None = None

    async def run(self) -> StreamState:
        """Drive the session to a terminal state and close the channel."""
        try:
            self.state = StreamState.VALIDATING
            error = self._validate()
            if error is not None:
                await self._finish(StreamState.ERRORED, stream_event("error", {"message": error}))
                return self.state

            self.state = StreamState.EXECUTING
            await self._execute()
        finally:
            if self.state not in TERMINAL_STATES:
                self.state = StreamState.ERRORED
            await self._close()
            logger.debug(f"Stream closed in state {self.state.value}")
        return self.state

    def _validate(self) -> str | None:
        try:
            self.invocation = StreamInvocation.decode(self.token)
        except StreamTokenDecodeError:
            return MSG_INVALID_TOKEN

        if self.catalog.get_model(self.invocation.model) is None:
            return MSG_MODEL_NOT_FOUND
        if not self.invocation.tool or not self.catalog.has_tool(self.invocation.tool):
            return MSG_TOOL_NOT_FOUND
        return None

    async def _execute(self) -> None:
        assert self.invocation is not None
        invocation = self.invocation

        await self._send(stream_event("progress", {"percent": 0, "status": "starting"}))

        call = asyncio.create_task(
            invoke_tool(
                self.catalog,
                self.executor,
                invocation.tool or "",
                invocation.parameters,
                model_id=invocation.model,
            )
        )
        listener = asyncio.create_task(self._listen_for_cancel())

        try:
            await self._send(stream_event("progress", {"percent": 30, "status": "fetching"}))
            done, _ = await asyncio.wait({call, listener}, return_when=asyncio.FIRST_COMPLETED)

            if call not in done:
                # Client cancelled or disconnected first
                call.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await call
                if listener.result():
                    await self._finish(StreamState.CANCELLED, stream_event("cancelled", {"message": MSG_CANCELLED}))
                else:
                    self.state = StreamState.CANCELLED
                return

            try:
                output = call.result()
            except Exception as e:
                logger.error(f"Stream invocation of {invocation.tool} failed: {e}")
                await self._finish(StreamState.ERRORED, stream_event("error", {"message": str(e)}))
                return

            await self._send(stream_event("progress", {"percent": 70, "status": "processing"}))
            await self._finish(
                StreamState.COMPLETED,
                stream_event("complete", {"type": "data", "model": invocation.model, "output": output}),
            )
        finally:
            for task in (call, listener):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

    async def _listen_for_cancel(self) -> bool:
        """Wait for a cancel message; False means the client went away."""
        while True:
            text = await self._receive()
            if text is None:
                return False
            try:
                message = orjson.loads(text)
            except orjson.JSONDecodeError:
                continue
            if isinstance(message, dict) and message.get("type") == "cancel":
                return True

    async def _finish(self, state: StreamState, event: dict[str, Any]) -> None:
        self.state = state
        await self._send(event)


__all__ = [
    "StreamInvocation",
    "StreamSession",
    "StreamState",
    "create_task_token",
    "stream_event",
    "TOKEN_VERSION",
]
