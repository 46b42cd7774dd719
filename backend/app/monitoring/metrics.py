"""Metric definitions for the relay."""

from __future__ import annotations

from .registry import registry


rooms_created_total = registry.counter(
    "relay_rooms_created_total",
    "Number of rooms allocated.",
)

rooms_closed_total = registry.counter(
    "relay_rooms_closed_total",
    "Number of rooms removed from the registry.",
    label_names=("reason",),
)

messages_total = registry.counter(
    "relay_messages_total",
    "Inbound signalling messages by type and outcome.",
    label_names=("type", "result"),
)

active_rooms = registry.gauge(
    "relay_active_rooms",
    "Rooms currently registered.",
)

active_connections = registry.gauge(
    "relay_active_connections",
    "WebSocket connections currently open.",
)


def reset_all() -> None:
    for metric in (
        rooms_created_total,
        rooms_closed_total,
        messages_total,
        active_rooms,
        active_connections,
    ):
        metric.reset()
