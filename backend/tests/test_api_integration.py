"""End-to-end tests running the relay through FastAPI's TestClient."""

from __future__ import annotations

import pytest
from starlette.websockets import WebSocketDisconnect

from app.api import ws as ws_module
from pairlink.realtime.managers import get_expiration_scheduler, get_room_registry


def _create_room(connection) -> str:
    connection.send_json({"type": "create_room"})
    reply = connection.receive_json()
    assert reply["type"] == "room_created"
    return reply["roomId"]


def test_health_reports_room_count(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["roomCount"] == 0
    assert isinstance(body["timestamp"], int)


def test_root_banner(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Signaling server is running"


def test_lifespan_starts_sweeper(client) -> None:
    assert get_expiration_scheduler().running


def test_create_join_offer_over_websocket(client) -> None:
    with client.websocket_connect("/ws") as creator:
        room_id = _create_room(creator)

        with client.websocket_connect("/") as joiner:
            joiner.send_json({"type": "join_room", "roomId": room_id})
            assert joiner.receive_json() == {"type": "join_success"}
            assert creator.receive_json() == {"type": "peer_joined"}

            creator.send_json({"type": "webrtc_offer", "roomId": room_id, "sdp": "v=0..."})
            assert joiner.receive_json() == {"type": "webrtc_offer", "sdp": "v=0..."}

            joiner.send_json({"type": "webrtc_answer", "roomId": room_id, "sdp": "v=0 answer"})
            assert creator.receive_json() == {"type": "webrtc_answer", "sdp": "v=0 answer"}

            stats = client.get("/stats").json()
            assert stats["totalRooms"] == 1
            assert stats["rooms"][0]["id"] == room_id
            assert stats["rooms"][0]["hasJoiner"] is True
            assert stats["rooms"][0]["lastActivity"] >= stats["rooms"][0]["createdAt"]

        assert creator.receive_json() == {"type": "peer_disconnected"}

    assert len(get_room_registry()) == 0


def test_join_unknown_room_over_websocket(client) -> None:
    with client.websocket_connect("/ws") as joiner:
        joiner.send_json({"type": "join_room", "roomId": "999999"})

        assert joiner.receive_json() == {"type": "error", "error": "room not found"}


def test_invalid_frames_keep_connection_open(client) -> None:
    with client.websocket_connect("/ws") as connection:
        connection.send_text("{not json")
        assert connection.receive_json() == {"type": "error", "error": "invalid message format"}

        connection.send_json({"type": "hello"})
        assert connection.receive_json() == {"type": "error", "error": "unknown message type"}

        connection.send_bytes(b'{"type": "create_room"}')
        assert connection.receive_json()["type"] == "room_created"

    assert client.get("/health").json()["roomCount"] == 0


def test_server_side_expiry_closes_socket(client, monkeypatch) -> None:
    scheduler = get_expiration_scheduler()
    monkeypatch.setattr(scheduler, "_room_timeout", 0.05)

    with client.websocket_connect("/ws") as creator:
        room_id = _create_room(creator)

        assert creator.receive_json() == {"type": "room_expired"}
        with pytest.raises(WebSocketDisconnect) as exc:
            creator.receive_json()
        assert exc.value.code == 1000

    assert room_id not in get_room_registry()


def test_websocket_connection_adapter_reports_state(client) -> None:
    captured = []
    original = ws_module.signaling_router.on_open

    async def capture(connection):
        captured.append(connection)
        await original(connection)

    ws_module.signaling_router.on_open = capture  # type: ignore[method-assign]
    try:
        with client.websocket_connect("/ws") as connection:
            _create_room(connection)
            assert captured and captured[0].is_open
    finally:
        del ws_module.signaling_router.on_open

    assert not captured[0].is_open


def test_metrics_endpoint_exposes_relay_counters(client) -> None:
    with client.websocket_connect("/ws") as creator:
        _create_room(creator)

    body = client.get("/metrics").text

    assert "# TYPE relay_rooms_created_total counter" in body
    assert "relay_rooms_created_total 1" in body
    assert 'relay_rooms_closed_total{reason="disconnect"} 1' in body
    assert 'relay_messages_total{type="create_room",result="handled"} 1' in body


def test_metrics_active_rooms_tracks_registry(client) -> None:
    with client.websocket_connect("/ws") as creator:
        _create_room(creator)
        assert "relay_active_rooms 1" in client.get("/metrics").text

    assert "relay_active_rooms 0" in client.get("/metrics").text
