"""Validation schema for Bisca rules and server configuration."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .state import MAX_PLAYERS, MIN_PLAYERS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PlayConfig(BaseModel):
    first_lead_must_be_trump: bool = Field(
        True,
        description="The first card of each hand must be trump if the leader holds one.",
    )


class MatchConfig(BaseModel):
    total_hands: int = Field(3, ge=1, description="Number of hands dealt in a match.")


class RoomConfig(BaseModel):
    capacity: int = Field(MAX_PLAYERS, ge=MIN_PLAYERS, le=MAX_PLAYERS, description="Seats in the room.")
    trick_pause_seconds: float = Field(
        1.5,
        ge=0,
        description="Delay between a trick filling up and its resolution.",
    )
    auto_start_when_full: bool = Field(True, description="Deal as soon as every seat is taken.")


class RuleSet(BaseModel):
    play: PlayConfig = Field(default_factory=PlayConfig)
    match: MatchConfig = Field(default_factory=MatchConfig)
    room: RoomConfig = Field(default_factory=RoomConfig)

    @classmethod
    def default(cls) -> "RuleSet":
        return cls()


class ServerSettings(BaseModel):
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    trick_pause_seconds: float = Field(1.5, ge=0)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)

    @field_validator("allowed_origins")
    @classmethod
    def ensure_origins(cls, value: list[str]) -> list[str]:
        origins = [origin.strip() for origin in value if origin.strip()]
        if not origins:
            raise ValueError("At least one allowed origin is required.")
        return origins

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return normalized

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        values: dict = {}
        if "BISCA_ALLOWED_ORIGINS" in env:
            values["allowed_origins"] = env["BISCA_ALLOWED_ORIGINS"].split(",")
        if "BISCA_TRICK_PAUSE_SECONDS" in env:
            values["trick_pause_seconds"] = env["BISCA_TRICK_PAUSE_SECONDS"]
        if "BISCA_LOG_LEVEL" in env:
            values["log_level"] = env["BISCA_LOG_LEVEL"]
        if "BISCA_HOST" in env:
            values["host"] = env["BISCA_HOST"]
        if "PORT" in env:
            values["port"] = env["PORT"]
        return cls(**values)
