"""Shared pytest fixtures for relay tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
for path in (ROOT_DIR, ROOT_DIR / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from app.main import app
from app.monitoring import metrics
from pairlink.realtime.expiration import ExpirationScheduler
from pairlink.realtime.managers import get_room_registry
from pairlink.rooms import RoomIdAllocator, RoomRegistry
from pairlink.signaling import SignalingRouter


class DummyConnection:
    """In-memory connection handle recording every frame it receives."""

    def __init__(self, name: str = "peer") -> None:
        self.name = name
        self.open = True
        self.sent: list[dict[str, Any]] = []
        self.closed: tuple[int, str] | None = None

    def __repr__(self) -> str:
        return f"DummyConnection({self.name!r})"

    @property
    def is_open(self) -> bool:
        return self.open

    async def send(self, text: str) -> None:
        if not self.open:
            return
        self.sent.append(json.loads(text))

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = (code, reason)
        self.open = False

    def types(self) -> list[str]:
        return [frame["type"] for frame in self.sent]


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedRandom:
    """Stand-in for ``random.Random`` replaying predetermined draws."""

    def __init__(self, *values: int) -> None:
        self._values = list(values)

    def randint(self, a: int, b: int) -> int:
        value = self._values.pop(0)
        assert a <= value <= b
        return value


class RecordingScheduler:
    """Scheduler double that only records which rooms were armed."""

    def __init__(self) -> None:
        self.armed: list[str] = []

    def arm_unpaired(self, room_id: str) -> None:
        self.armed.append(room_id)


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    metrics.reset_all()
    yield
    metrics.reset_all()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def registry(clock: FakeClock) -> RoomRegistry:
    return RoomRegistry(clock=clock, wall_clock=clock)


@pytest.fixture()
def recording_scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture()
def router(registry: RoomRegistry, recording_scheduler: RecordingScheduler) -> SignalingRouter:
    return SignalingRouter(registry, recording_scheduler)  # type: ignore[arg-type]


@pytest.fixture()
def scheduler(registry: RoomRegistry) -> ExpirationScheduler:
    return ExpirationScheduler(registry, room_timeout=30.0, cleanup_interval=10.0)


@pytest.fixture()
def make_registry():
    """Build a registry whose allocator replays the given room codes."""

    def factory(*codes: int, clock: FakeClock | None = None) -> RoomRegistry:
        allocator = RoomIdAllocator(rng=FixedRandom(*codes))  # type: ignore[arg-type]
        clock = clock or FakeClock()
        return RoomRegistry(allocator, clock=clock, wall_clock=clock)

    return factory


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """Yield a TestClient running the application lifespan on a clean registry."""

    registry = get_room_registry()
    registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    registry.clear()
