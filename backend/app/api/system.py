"""Health and room statistics endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.schemas.system import HealthRead, RoomStatsRead, StatsRead, to_millis
from pairlink.realtime.managers import get_room_registry
from pairlink.rooms import RoomRegistry

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthRead, response_model_by_alias=True)
def health_check(registry: RoomRegistry = Depends(get_room_registry)) -> HealthRead:
    """Report liveness together with the number of registered rooms."""

    return HealthRead(room_count=len(registry), timestamp=to_millis(time.time()))


@router.get("/stats", response_model=StatsRead, response_model_by_alias=True)
def room_stats(registry: RoomRegistry = Depends(get_room_registry)) -> StatsRead:
    rooms = [
        RoomStatsRead(
            id=room.id,
            created_at=to_millis(room.created_at),
            last_activity=to_millis(room.last_activity),
            has_joiner=room.has_joiner,
        )
        for room in sorted(registry.snapshot(), key=lambda item: item.created_at)
    ]
    return StatsRead(rooms=rooms, total_rooms=len(rooms))


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
def banner() -> str:
    return "Signaling server is running"
