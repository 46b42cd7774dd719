from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from pairlink.rooms.constants import (
    CLEANUP_INTERVAL_SECONDS,
    NORMAL_CLOSURE,
    ROOM_ID_MAX,
    ROOM_ID_MIN,
    ROOM_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Pairlink Relay", description="Human readable service name")
    environment: str = Field(default="development", description="Deployment environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:8080",
            "http://127.0.0.1",
            "http://127.0.0.1:8080",
        ],
        description="List of allowed CORS origins",
    )
    cors_allow_origin_regex: str | None = Field(
        default=r"^https?://(localhost|127\.0\.0\.1|\[::1\])(:\d+)?$",
        description="Optional regular expression that matches allowed CORS origins",
    )

    room_timeout_seconds: float = Field(
        default=ROOM_TIMEOUT_SECONDS,
        description="Lifetime of an unpaired room and idle threshold for paired rooms.",
    )
    cleanup_interval_seconds: float = Field(
        default=CLEANUP_INTERVAL_SECONDS,
        description="Period of the idle room sweep.",
    )
    room_id_min: int = Field(default=ROOM_ID_MIN, description="Smallest room code handed out")
    room_id_max: int = Field(default=ROOM_ID_MAX, description="Largest room code handed out")
    room_close_code: int = Field(
        default=NORMAL_CLOSURE,
        description="WebSocket close code used when a room expires.",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("room_timeout_seconds", "cleanup_interval_seconds")
    @classmethod
    def ensure_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @model_validator(mode="after")
    def check_room_id_range(self) -> "Settings":
        if self.room_id_min < 0 or self.room_id_max < self.room_id_min:
            raise ValueError("room_id_min must be non-negative and not exceed room_id_max")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
