"""WebSocket endpoint bridging socket events into the signalling router."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, WebSocket
from fastapi.websockets import WebSocketDisconnect, WebSocketState

from app.monitoring.metrics import active_connections
from pairlink.realtime.managers import get_signaling_router

router = APIRouter(tags=["ws"])

logger = logging.getLogger(__name__)

signaling_router = get_signaling_router()

# Older Starlette releases let the transport OSError through unconverted.
SOCKET_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)


class WebSocketConnection:
    """Adapt a Starlette websocket to the relay's connection contract."""

    __slots__ = ("_websocket",)

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.application_state == WebSocketState.CONNECTED
            and self._websocket.client_state == WebSocketState.CONNECTED
        )

    async def send(self, text: str) -> None:
        if not self.is_open:
            return
        try:
            await self._websocket.send_text(text)
        except SOCKET_ERRORS as exc:
            logger.debug("Failed to send websocket message: %s", exc)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self._websocket.application_state != WebSocketState.CONNECTED:
            return
        try:
            await self._websocket.close(code=code, reason=reason)
        except SOCKET_ERRORS as exc:
            logger.debug("Failed to close websocket: %s", exc)


async def iter_frames(websocket: WebSocket) -> AsyncIterator[str | bytes]:
    """Yield text or binary payloads until either side closes the socket."""

    while websocket.application_state == WebSocketState.CONNECTED:
        try:
            message = await websocket.receive()
        except (RuntimeError, WebSocketDisconnect):
            break
        if message["type"] == "websocket.disconnect":
            break
        text = message.get("text")
        if text is not None:
            yield text
            continue
        data = message.get("bytes")
        if data is not None:
            yield data
            continue
        logger.debug("Ignoring websocket frame without payload")


@router.websocket("/")
@router.websocket("/ws")
async def websocket_signaling(websocket: WebSocket) -> None:
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    active_connections.inc()
    logger.debug("WebSocket connection established")
    await signaling_router.on_open(connection)
    try:
        async for frame in iter_frames(websocket):
            await signaling_router.on_message(connection, frame)
    finally:
        active_connections.dec()
        logger.debug("WebSocket connection closed")
        await signaling_router.on_close(connection)
