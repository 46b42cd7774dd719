"""Signalling message codec and the pairing router."""

from .messages import ProtocolError, decode_message, encode_message  # noqa: F401
from .router import SignalingRouter, send_message  # noqa: F401

__all__ = [
    "ProtocolError",
    "SignalingRouter",
    "decode_message",
    "encode_message",
    "send_message",
]
