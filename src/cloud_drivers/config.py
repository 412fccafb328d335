"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from cloud_drivers.drivers.registry import DriverKind

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    driver: str = DriverKind.DUMMY.value
    supabase_url: str
    supabase_service_key: str
    boot_delay_seconds: float = 0.5
    session_listener_enabled: bool = True
    session_listener_host: str = "127.0.0.1"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_driver_kind(raw: str | None) -> DriverKind:
    """Parse the configured driver name, defaulting to the stub driver."""
    if raw is None:
        return DriverKind.DUMMY
    cleaned = raw.strip().lower()
    if cleaned in {"", "*"}:
        return DriverKind.DUMMY
    try:
        return DriverKind(cleaned)
    except ValueError:
        known = ", ".join(kind.value for kind in DriverKind)
        raise ValueError(f"Unknown driver '{raw}', expected one of: {known}") from None
