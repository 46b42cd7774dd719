from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


def test_defaults_match_room_constants(monkeypatch) -> None:
    for name in ("ROOM_TIMEOUT_SECONDS", "CLEANUP_INTERVAL_SECONDS", "ROOM_ID_MIN", "ROOM_ID_MAX"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.room_timeout_seconds == 30
    assert settings.cleanup_interval_seconds == 10
    assert (settings.room_id_min, settings.room_id_max) == (100000, 999999)
    assert settings.room_close_code == 1000


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("ROOM_TIMEOUT_SECONDS", "45")
    monkeypatch.setenv("CLEANUP_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example")

    settings = Settings(_env_file=None)

    assert settings.room_timeout_seconds == 45
    assert settings.cleanup_interval_seconds == 2.5
    assert settings.log_level == "DEBUG"
    assert [str(origin).rstrip("/") for origin in settings.cors_origins] == [
        "http://a.example",
        "http://b.example",
    ]


@pytest.mark.parametrize("field", ["room_timeout_seconds", "cleanup_interval_seconds"])
def test_non_positive_intervals_are_rejected(field) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_inverted_room_id_range_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, room_id_min=999999, room_id_max=100000)
