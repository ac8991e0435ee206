"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import GuildIdField, PortInt, VolumeFloat

DEFAULT_LOGGING_CONFIG = Path(__file__).resolve().parents[3] / "logging_config.json"


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    guild_ids: tuple[GuildIdField, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds", "guild_id")
    )
    sync_on_startup: bool = True

    @field_validator("guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int] | int) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, int):
            v = (v,)
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not isinstance(snowflake, int) or not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake!r}")
        return v


class PlaybackSettings(BaseModel):
    """Session lifecycle timings."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    connect_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        validation_alias=AliasChoices("connect_timeout_seconds", "connect_timeout"),
    )
    idle_grace_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=3600.0,
        validation_alias=AliasChoices("idle_grace_seconds", "idle_grace"),
    )
    queue_view_limit: int = Field(default=10, ge=1, le=25)


class AudioSettings(BaseModel):
    """Audio playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: VolumeFloat = 0.5
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio/best"
    socket_timeout: int = Field(default=10, ge=1, le=120)


class LivenessSettings(BaseModel):
    """HTTP liveness endpoint configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    host: str = "0.0.0.0"
    port: PortInt = 3000


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL, LOG_COLOR, LOG_CONFIG_PATH (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, DISCORD__SYNC_ON_STARTUP
    - PLAYBACK__CONNECT_TIMEOUT_SECONDS, PLAYBACK__IDLE_GRACE_SECONDS
    - AUDIO__DEFAULT_VOLUME, AUDIO__YTDLP_FORMAT, ...
    - LIVENESS__ENABLED, LIVENESS__HOST, LIVENESS__PORT
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_color: Literal["auto", "always", "never"] = "auto"
    log_config_path: Path = DEFAULT_LOGGING_CONFIG

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    liveness: LivenessSettings = Field(default_factory=LivenessSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
