"""Selection of the driver variant a process runs with."""

from dataclasses import dataclass
from enum import StrEnum

from cloud_drivers.adapters.session_listener import SessionListener
from cloud_drivers.drivers.base import (
    ConfigRepository,
    Driver,
    ImageRepository,
    MachineRepository,
)
from cloud_drivers.drivers.static import StaticDriver
from cloud_drivers.drivers.stub import StubDriver
from cloud_drivers.services.billing import UsageHistorySource
from cloud_drivers.services.lifecycle import MachineLifecycle


class DriverKind(StrEnum):
    """Driver variants available to the platform."""

    DUMMY = "dummy"
    MANUAL = "manual"


@dataclass(frozen=True)
class DriverDependencies:
    """Collaborators handed to whichever driver is selected."""

    machine_repository: MachineRepository
    image_repository: ImageRepository
    config_repository: ConfigRepository
    history_source: UsageHistorySource


def build_driver(
    kind: DriverKind,
    dependencies: DriverDependencies,
    *,
    boot_delay_seconds: float = 0.5,
    listener: SessionListener | None = None,
) -> Driver:
    """Create the driver for a kind."""
    lifecycle = MachineLifecycle(boot_delay_seconds=boot_delay_seconds)
    if kind is DriverKind.DUMMY:
        return StubDriver(
            machine_repository=dependencies.machine_repository,
            image_repository=dependencies.image_repository,
            config_repository=dependencies.config_repository,
            history_source=dependencies.history_source,
            listener=listener,
            lifecycle=lifecycle,
        )
    if kind is DriverKind.MANUAL:
        return StaticDriver(
            machine_repository=dependencies.machine_repository,
            config_repository=dependencies.config_repository,
            lifecycle=lifecycle,
        )
    raise ValueError(f"Unsupported driver kind: {kind}")
