"""Driver capability interface and the collaborators drivers depend on."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Protocol

from cloud_drivers.domain.errors import Unsupported
from cloud_drivers.domain.machines import Image, ImageSpec, Machine, MachineSpec


class MachineRepository(Protocol):
    """Orchestration-layer registry of machine records."""

    async def create(self, spec: MachineSpec, driver: str) -> Machine:
        """Register a machine record and return it."""

    async def get(self, machine_id: str) -> Machine | None:
        """Return a machine by id, if present."""


class ImageRepository(Protocol):
    """Orchestration-layer registry of image records."""

    async def set_default_size(self, name: str, instances_size: str) -> None:
        """Set the default flavor of the named image."""


class ConfigRepository(Protocol):
    """Key-value configuration service."""

    async def get(self, *keys: str) -> dict[str, object]:
        """Return the stored values for the requested keys."""


class Driver(ABC):
    """Backend abstraction for machine and image lifecycle operations.

    Operations a backend cannot honour raise Unsupported when called.
    """

    async def initialize(self) -> None:
        """Perform one-time backend setup."""

    @abstractmethod
    def name(self) -> str:
        """Return the stable backend identifier."""

    async def create_machine(self, spec: MachineSpec, image: Image) -> Machine:
        """Provision a machine from an image without waiting for readiness."""
        raise Unsupported(self.name(), "create_machine")

    async def start_machine(self, machine: Machine) -> Machine:
        """Request a machine to power on."""
        raise Unsupported(self.name(), "start_machine")

    async def stop_machine(self, machine: Machine) -> Machine:
        """Request a machine to power off."""
        raise Unsupported(self.name(), "stop_machine")

    async def destroy_machine(self, machine: Machine) -> None:
        """Remove a machine from the backend."""
        raise Unsupported(self.name(), "destroy_machine")

    async def create_image(self, spec: ImageSpec) -> Image:
        """Build an image from an existing machine."""
        raise Unsupported(self.name(), "create_image")

    async def get_user_credit(self, user_id: str) -> Decimal:
        """Return the credit a user consumed on this backend."""
        raise Unsupported(self.name(), "get_user_credit")

    async def refresh(self, machine: Machine) -> Machine:
        """Observe the machine and apply one lifecycle transition."""
        raise Unsupported(self.name(), "refresh")

    async def get_password(self, machine: Machine) -> str | None:
        """Return the machine's current secret."""
        raise Unsupported(self.name(), "get_password")

    def instances_size(self, size: str) -> str:
        """Normalize a requested flavor to one the backend supports."""
        return size

    async def close(self) -> None:
        """Release resources owned by the driver."""
