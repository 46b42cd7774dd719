"""Authoritative in-memory store of live rooms."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable

from ..connection import Connection
from .allocator import RoomIdAllocator
from .errors import AlreadyInRoomError, RoomFullError, RoomNotFoundError


Clock = Callable[[], float]


@dataclass(slots=True, eq=False)
class Room:
    """Pairing unit holding up to two endpoint handles."""

    id: str
    creator: Connection
    created_at: float
    last_activity: float
    joiner: Connection | None = None

    @property
    def is_paired(self) -> bool:
        return self.joiner is not None

    def has_member(self, connection: Connection) -> bool:
        return connection is self.creator or connection is self.joiner

    def counterpart(self, connection: Connection) -> Connection | None:
        """Return the other endpoint, or ``None`` for non-members."""

        if connection is self.creator:
            return self.joiner
        if self.joiner is not None and connection is self.joiner:
            return self.creator
        return None

    def endpoints(self) -> list[Connection]:
        return [self.creator] if self.joiner is None else [self.creator, self.joiner]


@dataclass(slots=True, frozen=True)
class RoomSnapshot:
    """Read-only view of a room for reporting endpoints, in epoch seconds."""

    id: str
    created_at: float
    last_activity: float
    has_joiner: bool


@dataclass(slots=True)
class _Index:
    rooms: dict[str, Room] = field(default_factory=dict)
    by_connection: dict[Connection, str] = field(default_factory=dict)


class RoomRegistry:
    """Own the room id -> :class:`Room` mapping.

    Every method is synchronous and runs under a single lock, so compound
    check-then-act operations (join, expiry, disconnect) are atomic with
    respect to each other. Nothing here performs I/O; callers send
    notifications after the call returns.

    Room timestamps come from the monotonic *clock* so idle checks ignore
    wall-clock steps. :meth:`snapshot` converts them to epoch seconds.
    """

    def __init__(
        self,
        allocator: RoomIdAllocator | None = None,
        *,
        clock: Clock = time.monotonic,
        wall_clock: Clock = time.time,
    ) -> None:
        self._allocator = allocator or RoomIdAllocator()
        self._clock = clock
        self._wall_clock = wall_clock
        self._state = _Index()
        self._lock = Lock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._state.rooms)

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._state.rooms

    # ------------------------------------------------------------------
    # Basic operations
    # ------------------------------------------------------------------
    def create(self, owner: Connection) -> Room:
        with self._lock:
            if owner in self._state.by_connection:
                raise AlreadyInRoomError(self._state.by_connection[owner])
            room_id = self._allocator.allocate(self._state.rooms)
            now = self._clock()
            room = Room(id=room_id, creator=owner, created_at=now, last_activity=now)
            self._state.rooms[room_id] = room
            self._state.by_connection[owner] = room_id
            return room

    def get(self, room_id: str) -> Room | None:
        with self._lock:
            return self._state.rooms.get(room_id)

    def remove(self, room_id: str) -> Room | None:
        with self._lock:
            return self._remove_locked(room_id)

    def touch(self, room_id: str, now: float | None = None) -> Room | None:
        with self._lock:
            room = self._state.rooms.get(room_id)
            if room is not None:
                self._touch_locked(room, now)
            return room

    def find_by_connection(self, connection: Connection) -> Room | None:
        with self._lock:
            return self._find_locked(connection)

    # ------------------------------------------------------------------
    # Compound operations used by the router and the scheduler
    # ------------------------------------------------------------------
    def join(self, room_id: str, joiner: Connection) -> Room:
        with self._lock:
            room = self._state.rooms.get(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            if room.joiner is not None:
                raise RoomFullError(room_id)
            if joiner in self._state.by_connection:
                raise AlreadyInRoomError(self._state.by_connection[joiner])
            room.joiner = joiner
            self._state.by_connection[joiner] = room_id
            self._touch_locked(room, None)
            return room

    def relay_target(self, room_id: str, sender: Connection) -> Connection | None:
        """Refresh the room activity and return the sender's counterpart.

        Returns ``None`` when the room is gone, the sender is not a member or
        the room has no joiner yet.
        """

        with self._lock:
            room = self._state.rooms.get(room_id)
            if room is None:
                return None
            self._touch_locked(room, None)
            return room.counterpart(sender)

    def touch_connection(self, connection: Connection) -> Room | None:
        with self._lock:
            room = self._find_locked(connection)
            if room is not None:
                self._touch_locked(room, None)
            return room

    def detach(self, connection: Connection) -> Room | None:
        """Remove the room referencing *connection*, if any."""

        with self._lock:
            room = self._find_locked(connection)
            if room is None:
                return None
            return self._remove_locked(room.id)

    def remove_if_unpaired(self, room_id: str) -> Room | None:
        with self._lock:
            room = self._state.rooms.get(room_id)
            if room is None or room.is_paired:
                return None
            return self._remove_locked(room_id)

    def remove_idle(self, threshold: float, now: float | None = None) -> list[Room]:
        """Remove and return rooms idle for strictly longer than *threshold*."""

        with self._lock:
            current = self._clock() if now is None else now
            stale = [
                room_id
                for room_id, room in self._state.rooms.items()
                if current - room.last_activity > threshold
            ]
            return [room for room in map(self._remove_locked, stale) if room is not None]

    def snapshot(self) -> list[RoomSnapshot]:
        """Return every room with timestamps converted to epoch seconds."""

        with self._lock:
            offset = self._wall_clock() - self._clock()
            return [
                RoomSnapshot(
                    id=room.id,
                    created_at=room.created_at + offset,
                    last_activity=room.last_activity + offset,
                    has_joiner=room.is_paired,
                )
                for room in self._state.rooms.values()
            ]

    def clear(self) -> None:
        with self._lock:
            self._state = _Index()

    # ------------------------------------------------------------------
    # Lock-held helpers
    # ------------------------------------------------------------------
    def _find_locked(self, connection: Connection) -> Room | None:
        room_id = self._state.by_connection.get(connection)
        if room_id is None:
            return None
        return self._state.rooms.get(room_id)

    def _touch_locked(self, room: Room, now: float | None) -> None:
        current = self._clock() if now is None else now
        if current > room.last_activity:
            room.last_activity = current

    def _remove_locked(self, room_id: str) -> Room | None:
        room = self._state.rooms.pop(room_id, None)
        if room is None:
            return None
        for endpoint in room.endpoints():
            if self._state.by_connection.get(endpoint) == room_id:
                self._state.by_connection.pop(endpoint, None)
        return room


__all__ = ["Room", "RoomRegistry", "RoomSnapshot"]
