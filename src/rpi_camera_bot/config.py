"""Application configuration."""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_MONITOR_INTERVAL_SECONDS = 1
MIN_IMAGE_WIDTH = 320
MIN_IMAGE_HEIGHT = 240
DEFAULT_MAINTENANCE_MESSAGE = "Bot is under maintenance. Please try again later."


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    telegram_allowed_usernames: str
    supabase_url: str
    supabase_service_key: str
    admin_token: str
    monitor_interval_seconds: int = DEFAULT_MONITOR_INTERVAL_SECONDS
    is_verbose: bool = False
    image_width: int = 640
    image_height: int = 480
    camera_params: dict[str, Any] = {}
    capture_timeout_seconds: float = 30.0
    is_in_maintenance: bool = False
    maintenance_message: str = ""
    photo_retention_per_user: int = 200
    loggly_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        frozen=True,
    )


@dataclass(frozen=True)
class BotConfig:
    """Resolved, immutable runtime configuration shared by all components."""

    allowed_usernames: frozenset[str]
    monitor_interval_seconds: int
    image_width: int
    image_height: int
    camera_params: MappingProxyType
    capture_timeout_seconds: float
    is_in_maintenance: bool
    maintenance_message: str
    photo_retention_per_user: int
    is_verbose: bool = False
    environment: str = field(default=_ENVIRONMENT)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BotConfig":
        """Resolve settings into runtime values, applying floors and defaults."""
        allowed = parse_allowed_usernames(settings.telegram_allowed_usernames)
        if not allowed:
            raise ConfigurationError("TELEGRAM_ALLOWED_USERNAMES must not be empty")
        if settings.capture_timeout_seconds <= 0:
            raise ConfigurationError("CAPTURE_TIMEOUT_SECONDS must be positive")
        interval = settings.monitor_interval_seconds
        if interval <= 0:
            interval = DEFAULT_MONITOR_INTERVAL_SECONDS
        return cls(
            allowed_usernames=allowed,
            monitor_interval_seconds=interval,
            image_width=max(settings.image_width, MIN_IMAGE_WIDTH),
            image_height=max(settings.image_height, MIN_IMAGE_HEIGHT),
            camera_params=MappingProxyType(dict(settings.camera_params)),
            capture_timeout_seconds=settings.capture_timeout_seconds,
            is_in_maintenance=settings.is_in_maintenance,
            maintenance_message=(
                settings.maintenance_message.strip() or DEFAULT_MAINTENANCE_MESSAGE
            ),
            photo_retention_per_user=max(settings.photo_retention_per_user, 0),
            is_verbose=settings.is_verbose,
            environment=settings.environment,
        )

    def is_allowed(self, username: str | None) -> bool:
        """Return true when the username belongs to the authorized set."""
        return username is not None and username in self.allowed_usernames


def parse_allowed_usernames(raw: str | None) -> frozenset[str]:
    """Parse allowed Telegram usernames from env."""
    if raw is None:
        return frozenset()
    names: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().lstrip("@")
        if value:
            names.add(value)
    return frozenset(names)
