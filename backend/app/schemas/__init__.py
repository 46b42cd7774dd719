"""Pydantic schemas for API payloads."""

from .system import HealthRead, RoomStatsRead, StatsRead

__all__ = [
    "HealthRead",
    "RoomStatsRead",
    "StatsRead",
]
