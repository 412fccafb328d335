"""Deterministic in-memory driver for tests and local development."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from cloud_drivers.adapters.session_listener import ADMIN_USER, SessionListener
from cloud_drivers.domain.errors import (
    BackendUnavailable,
    MachineInErrorState,
    MachineNotFound,
    ProvisioningFailed,
)
from cloud_drivers.domain.machines import (
    Image,
    ImageSpec,
    Machine,
    MachineSpec,
    MachineStatus,
)
from cloud_drivers.drivers.base import (
    ConfigRepository,
    Driver,
    ImageRepository,
    MachineRepository,
)
from cloud_drivers.services.billing import (
    BillingCalculator,
    PriceCatalog,
    UsageHistorySource,
)
from cloud_drivers.services.lifecycle import MachineLifecycle

BOOT_DELAY_KEY = "dummyBootingState"
DEFAULT_IMAGE_NAME = "Default"
DEFAULT_INSTANCES_SIZE = "medium"
HISTORY_BACKEND = "aws"
RDP_PORT = 3389

STUB_PRICING: dict[str, object] = {
    "products": {
        "SUPPEZST6XFGKCM2": {
            "sku": "SUPPEZST6XFGKCM2",
            "productFamily": "Compute Instance",
            "attributes": {
                "servicecode": "AmazonEC2",
                "location": "EU (Frankfurt)",
                "locationType": "AWS Region",
                "instanceType": "t2.small",
                "instanceFamily": "General purpose",
                "vcpu": "1",
                "physicalProcessor": "Intel Xeon Family",
                "clockSpeed": "Up to 3.3 GHz",
                "memory": "2 GiB",
                "storage": "EBS only",
                "networkPerformance": "Low to Moderate",
                "processorArchitecture": "32-bit or 64-bit",
                "tenancy": "Shared",
                "operatingSystem": "Windows",
                "licenseModel": "License Included",
                "usagetype": "EUC1-BoxUsage:t2.small",
                "operation": "RunInstances:0002",
                "preInstalledSw": "NA",
                "processorFeatures": "Intel AVX; Intel Turbo",
                "price": "0.04",
            },
        }
    }
}

_logger = logging.getLogger(__name__)


@dataclass
class StubDriver(Driver):
    """Driver keeping machines in memory, with an optional session listener."""

    machine_repository: MachineRepository
    image_repository: ImageRepository
    config_repository: ConfigRepository
    history_source: UsageHistorySource
    listener: SessionListener | None = None
    lifecycle: MachineLifecycle = field(default_factory=MachineLifecycle)
    billing: BillingCalculator = field(
        default_factory=lambda: BillingCalculator(
            PriceCatalog.from_products(STUB_PRICING)
        )
    )
    _machines: dict[str, Machine] = field(default_factory=dict)

    async def initialize(self) -> None:
        """Set the default image size and start the session listener."""
        try:
            await self.image_repository.set_default_size(
                DEFAULT_IMAGE_NAME, DEFAULT_INSTANCES_SIZE
            )
            if self.listener is not None:
                await self.listener.start()
        except Exception as exc:
            raise BackendUnavailable(f"Stub driver setup failed: {exc}") from exc
        _logger.info("Stub driver initialized")

    def name(self) -> str:
        """Return the driver name."""
        return "dummy"

    @property
    def address(self) -> str | None:
        """Return the session listener address, if one is running."""
        return self.listener.host if self._listener_running() else None

    @property
    def plaza_port(self) -> int | None:
        """Return the session listener port, if one is running."""
        return self.listener.port if self._listener_running() else None

    async def create_machine(self, spec: MachineSpec, image: Image) -> Machine:
        """Register a machine pointing at the local session listener."""
        if not spec.name.strip():
            raise ProvisioningFailed("Machine name is required")
        machine_id = str(uuid4())
        machine = Machine(
            id=machine_id,
            name=spec.name,
            type=self.name(),
            flavor=image.instances_size,
            ip=self.address,
            username=ADMIN_USER,
            password=spec.password,
            plaza_port=self.plaza_port,
            domain="",
            rdp_port=RDP_PORT,
            image_id=image.id,
            created_at=datetime.now(tz=UTC),
        )
        self._machines[machine_id] = machine
        _logger.info("Created machine %s (%s)", machine_id, spec.name)
        return machine

    async def start_machine(self, machine: Machine) -> Machine:
        """Accept a start request; the machine is unchanged."""
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

    async def destroy_machine(self, machine: Machine) -> None:
        """Forget a machine and cancel its pending boot."""
        if self._machines.pop(machine.id, None) is None:
            raise MachineNotFound(machine.id)
        self.lifecycle.cancel(machine.id)
        _logger.info("Destroyed machine %s", machine.id)

    async def create_image(self, spec: ImageSpec) -> Image:
        """Build an image inheriting the source machine's secret."""
        source = await self.machine_repository.get(spec.build_from)
        if source is None:
            source = self._machines.get(spec.build_from)
        if source is None:
            raise MachineNotFound(spec.build_from)
        return Image(
            id=str(uuid4()),
            name=spec.name,
            build_from=spec.build_from,
            password=source.password,
            instances_size=DEFAULT_INSTANCES_SIZE,
        )

    async def get_user_credit(self, user_id: str) -> Decimal:
        """Bill the user's history against the built-in catalog."""
        return await self.billing.user_credit(
            self.history_source, user_id, HISTORY_BACKEND
        )

    async def refresh(self, machine: Machine) -> Machine:
        """Apply one lifecycle transition to the machine."""
        config = await self.config_repository.get(BOOT_DELAY_KEY)
        simulate_boot_delay = bool(config.get(BOOT_DELAY_KEY))
        self._require(machine.id)
        refreshed = await self.lifecycle.advance(machine, simulate_boot_delay)
        # destroy may have run while the boot delay elapsed
        self._require(machine.id)
        self._machines[machine.id] = refreshed
        return refreshed

    async def get_password(self, machine: Machine) -> str | None:
        """Return the stored secret unless the machine failed."""
        if machine.status == MachineStatus.ERROR:
            raise MachineInErrorState(machine.id)
        return machine.password

    async def close(self) -> None:
        """Cancel pending boots and stop the session listener."""
        self.lifecycle.cancel_all()
        if self.listener is not None:
            await self.listener.stop()

    def machines(self) -> list[Machine]:
        """Return the machines currently known to the driver."""
        return list(self._machines.values())

    def _require(self, machine_id: str) -> Machine:
        machine = self._machines.get(machine_id)
        if machine is None:
            raise MachineNotFound(machine_id)
        return machine

    def _listener_running(self) -> bool:
        return self.listener is not None and self.listener.running
