"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

DEFAULT_ROLE_AREAS: dict[str, str] = {
    "Auxiliar de Toxicologia": "TOXICOLOGIA",
    "Auxiliar de Dosaje": "DOSAJE",
}


class Settings(BaseSettings):
    """Configuration values for the notification engine loaded from the environment."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    api_base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the REST API that serves backlog and read-state requests",
        min_length=1,
    )
    channel_url: str = Field(
        default="ws://localhost:8080/ws",
        description="WebSocket endpoint speaking STOMP for live notification pushes",
        min_length=1,
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token presented on the channel handshake and REST requests",
    )
    notification_limit: int = Field(
        default=20,
        description="Maximum number of notifications kept in the store",
        gt=0,
    )
    snapshot_database_url: str = Field(
        default="sqlite:///./alertsync.db",
        description="SQLAlchemy URL of the database holding the persisted snapshot",
        min_length=1,
    )
    snapshot_key: str = Field(
        default="notifications",
        description="Storage key under which the ordered list is persisted",
        min_length=1,
    )
    request_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for REST requests",
        gt=0,
    )
    reconnect_delay: float = Field(
        default=5.0,
        description="Seconds to wait before retrying a transient channel failure; 0 disables retries",
        ge=0,
    )
    max_reconnect_attempts: int = Field(
        default=0,
        description="Consecutive retries allowed after transient failures; 0 means unlimited",
        ge=0,
    )
    alert_sound_path: str | None = Field(
        default=None,
        description="Audio file played when a live notification arrives",
    )
    alert_player_command: str = Field(
        default="paplay",
        description="Executable used to play the alert sound",
        min_length=1,
    )
    alert_bell: bool = Field(
        default=False,
        description="Ring the terminal bell when a live notification arrives",
    )
    app_timezone: str | None = Field(
        default=None,
        description="Timezone used to interpret naive notification timestamps",
    )
    role_areas: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ROLE_AREAS),
        description="Mapping from operator role to the notification area it listens to",
    )
    default_role: str | None = Field(
        default=None,
        description="Role activated automatically when the host starts",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("api_base_url", "channel_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["DEFAULT_ROLE_AREAS", "Settings", "get_settings", "reset_settings_cache"]
