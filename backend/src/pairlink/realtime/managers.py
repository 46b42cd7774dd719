"""Process-wide relay components and their lifecycle hooks."""

from __future__ import annotations

import logging

from app.config import get_settings
from app.monitoring.metrics import active_rooms

from ..rooms import RoomIdAllocator, RoomRegistry
from ..signaling.router import SignalingRouter
from .expiration import ExpirationScheduler


logger = logging.getLogger(__name__)


settings = get_settings()

room_registry = RoomRegistry(
    RoomIdAllocator(minimum=settings.room_id_min, maximum=settings.room_id_max)
)
expiration_scheduler = ExpirationScheduler(
    room_registry,
    room_timeout=settings.room_timeout_seconds,
    cleanup_interval=settings.cleanup_interval_seconds,
    close_code=settings.room_close_code,
)
signaling_router = SignalingRouter(room_registry, expiration_scheduler)


async def startup_relay() -> None:
    await expiration_scheduler.start()


async def shutdown_relay() -> None:
    await expiration_scheduler.stop()
    dropped = len(room_registry)
    room_registry.clear()
    active_rooms.set(0)
    if dropped:
        logger.info("Discarded %s live rooms on shutdown", dropped)


# Convenience accessors exposed to the FastAPI layer ----------------------


def get_room_registry() -> RoomRegistry:
    return room_registry


def get_expiration_scheduler() -> ExpirationScheduler:
    return expiration_scheduler


def get_signaling_router() -> SignalingRouter:
    return signaling_router


__all__ = [
    "startup_relay",
    "shutdown_relay",
    "get_room_registry",
    "get_expiration_scheduler",
    "get_signaling_router",
]
