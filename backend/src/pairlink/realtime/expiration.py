"""Timers that reclaim abandoned rooms.

Two independent mechanisms run here:

* an unpaired timer armed once per room at creation, which expires the room
  ``room_timeout`` seconds later if nobody joined it, and
* a periodic idle sweep removing any room, paired or not, whose last activity
  is older than ``room_timeout``.

They may fire for the same room in close succession. Each one removes the
room through a single atomic registry call and acts only on what that call
returned, so whichever path loses the race does nothing.
"""

from __future__ import annotations

import asyncio
import logging

from app.monitoring.metrics import active_rooms, rooms_closed_total

from ..connection import Connection
from ..rooms import Room, RoomRegistry
from ..rooms.constants import CLEANUP_INTERVAL_SECONDS, NORMAL_CLOSURE, ROOM_TIMEOUT_SECONDS
from ..signaling.messages import RoomExpired
from ..signaling.router import send_message


logger = logging.getLogger(__name__)

EXPIRED_REASON = "room expired"
IDLE_REASON = "room timed out"


class ExpirationScheduler:
    """Own the unpaired-room timers and the idle sweeper task."""

    def __init__(
        self,
        registry: RoomRegistry,
        *,
        room_timeout: float = ROOM_TIMEOUT_SECONDS,
        cleanup_interval: float = CLEANUP_INTERVAL_SECONDS,
        close_code: int = NORMAL_CLOSURE,
    ) -> None:
        self._registry = registry
        self._room_timeout = room_timeout
        self._cleanup_interval = cleanup_interval
        self._close_code = close_code
        self._timers: set[asyncio.Task[bool]] = set()
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def room_timeout(self) -> float:
        return self._room_timeout

    @property
    def cleanup_interval(self) -> float:
        return self._cleanup_interval

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    # ------------------------------------------------------------------
    # Unpaired-room timer
    # ------------------------------------------------------------------
    def arm_unpaired(self, room_id: str) -> asyncio.Task[bool]:
        """Schedule the one-shot expiry of *room_id*.

        Joining the room does not cancel the timer; the fire-time check turns
        it into a no-op instead.
        """

        task = asyncio.get_running_loop().create_task(
            self._unpaired_timer(room_id), name=f"room-expiry-{room_id}"
        )
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)
        return task

    async def _unpaired_timer(self, room_id: str) -> bool:
        await asyncio.sleep(self._room_timeout)
        return await self.expire_unpaired(room_id)

    async def expire_unpaired(self, room_id: str) -> bool:
        """Expire *room_id* if it is still registered and unpaired."""

        room = self._registry.remove_if_unpaired(room_id)
        if room is None:
            return False
        rooms_closed_total.labels("unpaired_timeout").inc()
        active_rooms.set(len(self._registry))
        logger.info("Room %s expired without a peer", room_id)
        creator = room.creator
        try:
            delivered = await send_message(creator, RoomExpired())
        except Exception:
            logger.warning("Failed to notify the creator of room %s", room_id, exc_info=True)
            delivered = False
        if delivered:
            await self._close_endpoint(creator, EXPIRED_REASON)
        return True

    # ------------------------------------------------------------------
    # Idle sweep
    # ------------------------------------------------------------------
    async def sweep(self, now: float | None = None) -> list[Room]:
        """Remove rooms idle for longer than the room timeout."""

        stale = self._registry.remove_idle(self._room_timeout, now)
        if not stale:
            return stale
        rooms_closed_total.labels("idle_timeout").inc(len(stale))
        active_rooms.set(len(self._registry))
        for room in stale:
            logger.info("Cleaning up idle room %s", room.id)
            for endpoint in room.endpoints():
                if endpoint.is_open:
                    await self._close_endpoint(endpoint, IDLE_REASON)
        return stale

    async def _close_endpoint(self, endpoint: Connection, reason: str) -> None:
        # One failing socket must not leave the remaining endpoints open.
        try:
            await endpoint.close(self._close_code, reason)
        except Exception:
            logger.warning("Failed to close %r (%s)", endpoint, reason, exc_info=True)

    async def _run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            try:
                await self.sweep()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Idle room sweep failed")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self.running:
            return
        self._sweeper = asyncio.get_running_loop().create_task(
            self._run_sweeper(), name="room-idle-sweeper"
        )
        logger.info(
            "Room expiry started: timeout=%ss sweep interval=%ss",
            self._room_timeout,
            self._cleanup_interval,
        )

    async def stop(self) -> None:
        tasks = list(self._timers)
        if self._sweeper is not None:
            tasks.append(self._sweeper)
            self._sweeper = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers.clear()


__all__ = ["ExpirationScheduler", "EXPIRED_REASON", "IDLE_REASON"]
