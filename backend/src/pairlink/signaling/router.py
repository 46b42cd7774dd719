"""Message dispatch and the two-party pairing state machine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from app.monitoring.metrics import active_rooms, messages_total, rooms_closed_total, rooms_created_total

from ..connection import Connection
from ..rooms import RoomError, RoomRegistry
from .messages import (
    CreateRoom,
    ErrorMessage,
    IceCandidate,
    InboundMessage,
    JoinRoom,
    JoinSuccess,
    Keepalive,
    OutboundMessage,
    PeerDisconnected,
    PeerJoined,
    ProtocolError,
    RelayedMessage,
    RoomCreated,
    WebRTCAnswer,
    WebRTCOffer,
    decode_message,
    encode_message,
    forwarded_copy,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from ..realtime.expiration import ExpirationScheduler


logger = logging.getLogger(__name__)


async def send_message(connection: Connection | None, message: OutboundMessage) -> bool:
    """Send *message* if the connection is still open.

    Returns True when the frame was handed to the transport.
    """

    if connection is None or not connection.is_open:
        return False
    await connection.send(encode_message(message))
    return True


class SignalingRouter:
    """Drive room lifecycle transitions from inbound connection events.

    Rooms move WAITING -> PAIRED -> CLOSED. The registry holds the state;
    this class only decides which registry operation to call and who to
    notify once it returns.
    """

    def __init__(self, registry: RoomRegistry, scheduler: "ExpirationScheduler") -> None:
        self._registry = registry
        self._scheduler = scheduler
        self._handlers: dict[type, Callable[[Connection, InboundMessage], Awaitable[None]]] = {
            CreateRoom: self._create_room,
            JoinRoom: self._join_room,
            WebRTCOffer: self._relay,
            WebRTCAnswer: self._relay,
            IceCandidate: self._relay,
            Keepalive: self._keepalive,
        }

    @property
    def registry(self) -> RoomRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Connection lifecycle callbacks
    # ------------------------------------------------------------------
    async def on_open(self, connection: Connection) -> None:
        """Nothing is tracked until the connection creates or joins a room."""

    async def on_message(self, connection: Connection, raw: str | bytes) -> None:
        try:
            message = decode_message(raw)
        except ProtocolError as exc:
            logger.warning("Rejected signalling frame: %s", exc.detail)
            messages_total.labels("unknown", "rejected").inc()
            await send_message(connection, ErrorMessage(error=exc.detail))
            return
        await self.dispatch(connection, message)

    async def on_close(self, connection: Connection) -> None:
        room = self._registry.detach(connection)
        if room is None:
            return
        rooms_closed_total.labels("disconnect").inc()
        active_rooms.set(len(self._registry))
        logger.info("Room %s closed after an endpoint disconnected", room.id)
        await send_message(room.counterpart(connection), PeerDisconnected())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    async def dispatch(self, connection: Connection, message: InboundMessage) -> None:
        handler = self._handlers[type(message)]
        try:
            await handler(connection, message)
        except RoomError as exc:
            logger.info("Room request %s failed: %s", message.type, exc.detail)
            messages_total.labels(message.type, "rejected").inc()
            await send_message(connection, ErrorMessage(error=exc.detail))

    async def _create_room(self, connection: Connection, message: CreateRoom) -> None:
        room = self._registry.create(connection)
        rooms_created_total.inc()
        active_rooms.set(len(self._registry))
        messages_total.labels(message.type, "handled").inc()
        logger.info("Created room %s", room.id)
        self._scheduler.arm_unpaired(room.id)
        await send_message(connection, RoomCreated(room_id=room.id))

    async def _join_room(self, connection: Connection, message: JoinRoom) -> None:
        room = self._registry.join(message.room_id, connection)
        messages_total.labels(message.type, "handled").inc()
        logger.info("Peer joined room %s", room.id)
        await send_message(connection, JoinSuccess())
        await send_message(room.creator, PeerJoined())

    async def _relay(self, connection: Connection, message: RelayedMessage) -> None:
        target = self._registry.relay_target(message.room_id, connection)
        if await send_message(target, forwarded_copy(message)):
            messages_total.labels(message.type, "forwarded").inc()
            return
        messages_total.labels(message.type, "dropped").inc()
        logger.debug("Dropped %s for room %s: no open counterpart", message.type, message.room_id)

    async def _keepalive(self, connection: Connection, message: Keepalive) -> None:
        room = self._registry.touch_connection(connection)
        if room is None:
            messages_total.labels(message.type, "dropped").inc()
            logger.debug("Keepalive from a connection without a room")
            return
        messages_total.labels(message.type, "handled").inc()


__all__ = ["SignalingRouter", "send_message"]
