"""Domain models for machines and images."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum


class MachineStatus(StrEnum):
    """Lifecycle states a machine can be observed in."""

    BOOTING = "booting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"
    # Owned by the orchestration layer after a destroy; drivers never set it.
    TERMINATED = "terminated"


@dataclass(frozen=True)
class MachineSpec:
    """Requested machine attributes, before a backend assigns an identity."""

    name: str
    flavor: str | None = None
    ip: str | None = None
    username: str | None = None
    password: str | None = None
    plaza_port: int | None = None
    domain: str = ""
    rdp_port: int = 3389


@dataclass(frozen=True)
class Machine:
    """A provisioned compute instance tracked by the platform."""

    id: str
    name: str
    type: str
    flavor: str | None
    ip: str | None
    username: str | None
    password: str | None = None
    plaza_port: int | None = None
    domain: str = ""
    rdp_port: int = 3389
    image_id: str | None = None
    status: MachineStatus | None = None
    created_at: datetime | None = None
    destroyed_at: datetime | None = None

    def with_status(self, status: MachineStatus) -> "Machine":
        """Return a copy of the machine in another status."""
        return replace(self, status=status)

    def with_password(self, password: str | None) -> "Machine":
        """Return a copy of the machine carrying another secret."""
        return replace(self, password=password)


@dataclass(frozen=True)
class ImageSpec:
    """Request to build an image from an existing machine."""

    name: str
    build_from: str


@dataclass(frozen=True)
class Image:
    """Reusable provisioning template derived from a machine."""

    id: str
    name: str
    build_from: str | None
    password: str | None
    instances_size: str
