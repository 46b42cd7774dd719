"""Prometheus text endpoint for relay metrics."""

from fastapi import APIRouter, Depends, Response

from app.monitoring.metrics import active_rooms
from app.monitoring.registry import registry as metrics_registry
from pairlink.realtime.managers import get_room_registry
from pairlink.rooms import RoomRegistry


router = APIRouter(tags=["metrics"])

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4"


@router.get("/metrics", response_class=Response)
def export_metrics(rooms: RoomRegistry = Depends(get_room_registry)) -> Response:
    # Gauge is resynced from the registry on every scrape.
    active_rooms.set(len(rooms))
    return Response(content=metrics_registry.render(), media_type=PROMETHEUS_CONTENT_TYPE)
