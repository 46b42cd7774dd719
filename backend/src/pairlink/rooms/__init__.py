"""Room registry, code allocation and the errors they raise."""

from .allocator import RoomIdAllocator
from .errors import (
    AlreadyInRoomError,
    RoomCapacityError,
    RoomError,
    RoomFullError,
    RoomNotFoundError,
)
from .registry import Room, RoomRegistry, RoomSnapshot

__all__ = [
    "AlreadyInRoomError",
    "Room",
    "RoomCapacityError",
    "RoomError",
    "RoomFullError",
    "RoomIdAllocator",
    "RoomNotFoundError",
    "RoomRegistry",
    "RoomSnapshot",
]
