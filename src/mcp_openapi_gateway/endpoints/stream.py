#!/usr/bin/env python3
"""
endpoints/stream.py - WebSocket transport for StreamSession
"""

import logging
from typing import Any

import orjson
from starlette.websockets import WebSocket, WebSocketState

from ..errors import DocumentFetchError, InsecureServerURL, InvalidOpenAPIDocument, UnknownSource
from ..stream import StreamSession, stream_event
from .utils import count_usage, load_catalog

logger = logging.getLogger(__name__)


async def stream_websocket(websocket: WebSocket) -> None:
    source = websocket.path_params["source"]
    task_id = websocket.path_params["task_id"]
    await websocket.accept()
    logger.debug(f"Stream opened for {source}")

    async def send(event: dict[str, Any]) -> None:
        await websocket.send_text(orjson.dumps(event).decode())

    async def receive() -> str | None:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return None
        if message.get("text") is not None:
            return message["text"]
        return (message.get("bytes") or b"").decode("utf-8", errors="replace")

    async def close() -> None:
        if (
            websocket.client_state == WebSocketState.CONNECTED
            and websocket.application_state == WebSocketState.CONNECTED
        ):
            await websocket.close()

    try:
        catalog = await load_catalog(websocket.app.state, source)
    except (UnknownSource, InvalidOpenAPIDocument, InsecureServerURL, DocumentFetchError) as e:
        logger.warning(f"Cannot stream from source {source!r}: {e}")
        await send(stream_event("error", {"message": str(e)}))
        await close()
        return

    count_usage(websocket, "stream")
    session = StreamSession(catalog, websocket.app.state.executor, task_id, send, receive, close)
    state = await session.run()
    logger.debug(f"Stream for {source} finished: {state.value}")
