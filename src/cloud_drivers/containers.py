"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cloud_drivers.adapters.session_listener import SessionListener
from cloud_drivers.adapters.supabase_config_repository import (
    SupabaseConfigRepository,
)
from cloud_drivers.adapters.supabase_image_repository import SupabaseImageRepository
from cloud_drivers.adapters.supabase_machine_repository import (
    SupabaseMachineRepository,
)
from cloud_drivers.adapters.supabase_usage_repository import SupabaseUsageRepository
from cloud_drivers.config import Settings, parse_driver_kind
from cloud_drivers.drivers.base import Driver
from cloud_drivers.drivers.registry import DriverDependencies, build_driver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    dependencies: DriverDependencies
    driver: Driver
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    dependencies = DriverDependencies(
        machine_repository=SupabaseMachineRepository(supabase_client),
        image_repository=SupabaseImageRepository(supabase_client),
        config_repository=SupabaseConfigRepository(supabase_client),
        history_source=SupabaseUsageRepository(supabase_client),
    )
    listener = (
        SessionListener(host=resolved_settings.session_listener_host)
        if resolved_settings.session_listener_enabled
        else None
    )
    driver = build_driver(
        parse_driver_kind(resolved_settings.driver),
        dependencies,
        boot_delay_seconds=resolved_settings.boot_delay_seconds,
        listener=listener,
    )

    async def close_resources() -> None:
        await driver.close()

    return AppContainer(
        settings=resolved_settings,
        dependencies=dependencies,
        driver=driver,
        close_resources=close_resources,
    )
