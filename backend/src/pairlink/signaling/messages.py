"""Typed signalling messages and their JSON codec.

Inbound frames are flat JSON objects tagged by ``type``. They are decoded into
one variant of :data:`InboundMessage`; negotiation payloads (``sdp`` and
``candidate``) are carried through untouched.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

INVALID_MESSAGE_FORMAT = "invalid message format"
UNKNOWN_MESSAGE_TYPE = "unknown message type"


class ProtocolError(Exception):
    """Raised when a frame cannot be decoded into a known message."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class _Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class CreateRoom(_Message):
    type: Literal["create_room"] = "create_room"


class JoinRoom(_Message):
    type: Literal["join_room"] = "join_room"
    room_id: str = Field(alias="roomId")


class WebRTCOffer(_Message):
    type: Literal["webrtc_offer"] = "webrtc_offer"
    room_id: str = Field(alias="roomId")
    sdp: str


class WebRTCAnswer(_Message):
    type: Literal["webrtc_answer"] = "webrtc_answer"
    room_id: str = Field(alias="roomId")
    sdp: str


class IceCandidate(_Message):
    type: Literal["ice_candidate"] = "ice_candidate"
    room_id: str = Field(alias="roomId")
    candidate: Any


class Keepalive(_Message):
    type: Literal["keepalive"] = "keepalive"


InboundMessage = Annotated[
    Union[CreateRoom, JoinRoom, WebRTCOffer, WebRTCAnswer, IceCandidate, Keepalive],
    Field(discriminator="type"),
]

RelayedMessage = Union[WebRTCOffer, WebRTCAnswer, IceCandidate]

INBOUND_TYPES = frozenset(
    {"create_room", "join_room", "webrtc_offer", "webrtc_answer", "ice_candidate", "keepalive"}
)

_inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class RoomCreated(_Message):
    type: Literal["room_created"] = "room_created"
    room_id: str = Field(alias="roomId")


class JoinSuccess(_Message):
    type: Literal["join_success"] = "join_success"


class PeerJoined(_Message):
    type: Literal["peer_joined"] = "peer_joined"


class PeerDisconnected(_Message):
    type: Literal["peer_disconnected"] = "peer_disconnected"


class RoomExpired(_Message):
    type: Literal["room_expired"] = "room_expired"


class ForwardedDescription(_Message):
    type: Literal["webrtc_offer", "webrtc_answer"]
    sdp: str


class ForwardedCandidate(_Message):
    type: Literal["ice_candidate"] = "ice_candidate"
    candidate: Any


class ErrorMessage(_Message):
    type: Literal["error"] = "error"
    error: str


OutboundMessage = Union[
    RoomCreated,
    JoinSuccess,
    PeerJoined,
    PeerDisconnected,
    RoomExpired,
    ForwardedDescription,
    ForwardedCandidate,
    ErrorMessage,
]


def decode_message(raw: str | bytes) -> InboundMessage:
    """Parse a raw frame, raising :class:`ProtocolError` on failure."""

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(INVALID_MESSAGE_FORMAT) from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProtocolError(INVALID_MESSAGE_FORMAT) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
        raise ProtocolError(INVALID_MESSAGE_FORMAT)
    if payload["type"] not in INBOUND_TYPES:
        raise ProtocolError(UNKNOWN_MESSAGE_TYPE)

    try:
        return _inbound_adapter.validate_python(payload)
    except ValidationError as exc:
        raise ProtocolError(INVALID_MESSAGE_FORMAT) from exc


def encode_message(message: OutboundMessage) -> str:
    return json.dumps(message.model_dump(mode="json", by_alias=True), separators=(",", ":"))


def forwarded_copy(message: RelayedMessage) -> ForwardedDescription | ForwardedCandidate:
    """Strip the routing field, keeping the negotiation payload as received."""

    if isinstance(message, IceCandidate):
        return ForwardedCandidate(candidate=message.candidate)
    return ForwardedDescription(type=message.type, sdp=message.sdp)


__all__ = [
    "INVALID_MESSAGE_FORMAT",
    "UNKNOWN_MESSAGE_TYPE",
    "ProtocolError",
    "CreateRoom",
    "JoinRoom",
    "WebRTCOffer",
    "WebRTCAnswer",
    "IceCandidate",
    "Keepalive",
    "InboundMessage",
    "RelayedMessage",
    "RoomCreated",
    "JoinSuccess",
    "PeerJoined",
    "PeerDisconnected",
    "RoomExpired",
    "ForwardedDescription",
    "ForwardedCandidate",
    "ErrorMessage",
    "OutboundMessage",
    "decode_message",
    "encode_message",
    "forwarded_copy",
]
