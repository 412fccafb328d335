"""Driver operating over a pre-declared list of machines.

The machines are read from the ``machines`` configuration key and registered
once at startup. The driver cannot create, destroy or image machines.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

from cloud_drivers.domain.errors import (
    BackendUnavailable,
    MachineInErrorState,
    MachineNotFound,
)
from cloud_drivers.domain.machines import Machine, MachineSpec, MachineStatus
from cloud_drivers.drivers.base import ConfigRepository, Driver, MachineRepository
from cloud_drivers.services.lifecycle import MachineLifecycle

MACHINES_KEY = "machines"

_logger = logging.getLogger(__name__)


class StaticMachineConfig(BaseModel):
    """A machine entry of the static configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    ip: str | None = None
    username: str | None = None
    password: str | None = None
    flavor: str | None = None
    plaza_port: int | None = Field(default=None, alias="plazaport")
    domain: str = ""
    rdp_port: int = Field(default=3389, alias="rdpPort")

    def to_spec(self) -> MachineSpec:
        """Convert the entry to a creation request."""
        return MachineSpec(
            name=self.name,
            flavor=self.flavor,
            ip=self.ip,
            username=self.username,
            password=self.password,
            plaza_port=self.plaza_port,
            domain=self.domain,
            rdp_port=self.rdp_port,
        )


def parse_machine_entries(raw: object) -> list[StaticMachineConfig]:
    """Validate the configured machine list."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("'machines' must be a list")
    return [StaticMachineConfig.model_validate(entry) for entry in raw]


@dataclass
class StaticDriver(Driver):
    """Driver for machines managed outside the platform."""

    machine_repository: MachineRepository
    config_repository: ConfigRepository
    lifecycle: MachineLifecycle = field(default_factory=MachineLifecycle)
    _machines: dict[str, Machine] = field(default_factory=dict)

    async def initialize(self) -> None:
        """Register every configured machine."""
        try:
            config = await self.config_repository.get(MACHINES_KEY)
            entries = parse_machine_entries(config.get(MACHINES_KEY))
            machines = await asyncio.gather(
                *(
                    self.machine_repository.create(entry.to_spec(), self.name())
                    for entry in entries
                )
            )
        except (ValueError, RuntimeError) as exc:
            raise BackendUnavailable(f"Static machine list is invalid: {exc}") from exc
        for machine in machines:
            self._machines[machine.id] = machine
        _logger.info("Registered %s static machines", len(machines))

    def name(self) -> str:
        """Return the driver name."""
        return "manual"

    async def start_machine(self, machine: Machine) -> Machine:
        """Accept a start request for a registered machine."""
        self._require(machine.id)
        return machine

    async def stop_machine(self, machine: Machine) -> Machine:
        """Accept a stop request; the next refresh confirms it."""
        self._require(machine.id)
        if machine.status in {MachineStatus.ERROR, MachineStatus.STOPPED}:
            return machine
        stopping = machine.with_status(MachineStatus.STOPPING)
        self._machines[machine.id] = stopping
        return stopping

    async def refresh(self, machine: Machine) -> Machine:
        """Apply one lifecycle transition; static machines boot instantly."""
        self._require(machine.id)
        refreshed = await self.lifecycle.advance(machine, simulate_boot_delay=False)
        self._machines[machine.id] = refreshed
        return refreshed

    async def get_password(self, machine: Machine) -> str | None:
        """Return the configured secret unless the machine failed."""
        self._require(machine.id)
        if machine.status == MachineStatus.ERROR:
            raise MachineInErrorState(machine.id)
        return machine.password

    def machines(self) -> list[Machine]:
        """Return the registered machines."""
        return list(self._machines.values())

    def _require(self, machine_id: str) -> Machine:
        machine = self._machines.get(machine_id)
        if machine is None:
            raise MachineNotFound(machine_id)
        return machine
