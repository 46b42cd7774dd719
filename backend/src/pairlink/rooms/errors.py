"""Exceptions raised by the room registry.

Each error carries the ``detail`` string that is reported verbatim to the
client in an ``error`` message.
"""

from __future__ import annotations


class RoomError(Exception):
    """Base class for client-facing room errors."""

    detail = "room error"

    def __init__(self, room_id: str | None = None, detail: str | None = None) -> None:
        self.room_id = room_id
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class RoomNotFoundError(RoomError):
    detail = "room not found"


class RoomFullError(RoomError):
    detail = "room full"


class AlreadyInRoomError(RoomError):
    detail = "already in a room"


class RoomCapacityError(RoomError):
    """Raised when every code of the namespace is in use."""

    detail = "no room codes available"


__all__ = [
    "RoomError",
    "RoomNotFoundError",
    "RoomFullError",
    "AlreadyInRoomError",
    "RoomCapacityError",
]
