"""Schemas for the health and stats endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def to_millis(seconds: float) -> int:
    return int(round(seconds * 1000))


class HealthRead(BaseModel):
    """Liveness probe payload."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(default="ok", description="Service status")
    room_count: int = Field(..., alias="roomCount", ge=0, description="Rooms currently registered")
    timestamp: int = Field(..., description="Server time in epoch milliseconds")


class RoomStatsRead(BaseModel):
    """Public view of a single room."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: int = Field(..., alias="createdAt", description="Creation time in epoch milliseconds")
    last_activity: int = Field(
        ..., alias="lastActivity", description="Last pairing activity in epoch milliseconds"
    )
    has_joiner: bool = Field(..., alias="hasJoiner")


class StatsRead(BaseModel):
    """Snapshot of every live room."""

    model_config = ConfigDict(populate_by_name=True)

    rooms: list[RoomStatsRead] = Field(default_factory=list)
    total_rooms: int = Field(..., alias="totalRooms", ge=0)
