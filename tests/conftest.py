"""Shared test fixtures."""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import uuid4

import pytest

from cloud_drivers.config import Settings
from cloud_drivers.domain.billing import UsageRecord
from cloud_drivers.domain.machines import Image, Machine, MachineSpec
from cloud_drivers.drivers.base import (
    ConfigRepository,
    ImageRepository,
    MachineRepository,
)
from cloud_drivers.drivers.registry import DriverDependencies
from cloud_drivers.drivers.static import StaticDriver
from cloud_drivers.drivers.stub import StubDriver
from cloud_drivers.services.billing import UsageHistorySource
from cloud_drivers.services.lifecycle import MachineLifecycle


@dataclass
class InMemoryMachineRepository(MachineRepository):
    """In-memory machine registry for tests."""

    machines: dict[str, Machine] = field(default_factory=dict)

    async def create(self, spec: MachineSpec, driver: str) -> Machine:
        machine = Machine(
            id=str(uuid4()),
            name=spec.name,
            type=driver,
            flavor=spec.flavor,
            ip=spec.ip,
            username=spec.username,
            password=spec.password,
            plaza_port=spec.plaza_port,
            domain=spec.domain,
            rdp_port=spec.rdp_port,
        )
        self.machines[machine.id] = machine
        return machine

    async def get(self, machine_id: str) -> Machine | None:
        return self.machines.get(machine_id)


@dataclass
class InMemoryImageRepository(ImageRepository):
    """In-memory image registry that records size updates."""

    sizes: dict[str, str] = field(default_factory=dict)

    async def set_default_size(self, name: str, instances_size: str) -> None:
        self.sizes[name] = instances_size


@dataclass
class InMemoryConfigRepository(ConfigRepository):
    """In-memory key-value configuration."""

    values: dict[str, object] = field(default_factory=dict)
    reads: int = 0

    async def get(self, *keys: str) -> dict[str, object]:
        self.reads += 1
        return {key: self.values.get(key) for key in keys}


@dataclass
class InMemoryUsageHistory(UsageHistorySource):
    """In-memory usage history keyed by user and backend."""

    records: dict[tuple[str, str], list[UsageRecord]] = field(default_factory=dict)
    error: Exception | None = None

    def add(self, user_id: str, backend: str, instance_type: str, time: str) -> None:
        self.records.setdefault((user_id, backend), []).append(
            UsageRecord(instance_type=instance_type, time=Decimal(time))
        )

    async def get_history(self, user_id: str, backend: str) -> list[UsageRecord]:
        if self.error is not None:
            raise self.error
        return list(self.records.get((user_id, backend), []))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def machine_repository() -> InMemoryMachineRepository:
    return InMemoryMachineRepository()


@pytest.fixture
def image_repository() -> InMemoryImageRepository:
    return InMemoryImageRepository()


@pytest.fixture
def config_repository() -> InMemoryConfigRepository:
    return InMemoryConfigRepository()


@pytest.fixture
def history() -> InMemoryUsageHistory:
    return InMemoryUsageHistory()


@pytest.fixture
def dependencies(
    machine_repository: InMemoryMachineRepository,
    image_repository: InMemoryImageRepository,
    config_repository: InMemoryConfigRepository,
    history: InMemoryUsageHistory,
) -> DriverDependencies:
    return DriverDependencies(
        machine_repository=machine_repository,
        image_repository=image_repository,
        config_repository=config_repository,
        history_source=history,
    )


@pytest.fixture
def stub_driver(
    machine_repository: InMemoryMachineRepository,
    image_repository: InMemoryImageRepository,
    config_repository: InMemoryConfigRepository,
    history: InMemoryUsageHistory,
) -> StubDriver:
    return StubDriver(
        machine_repository=machine_repository,
        image_repository=image_repository,
        config_repository=config_repository,
        history_source=history,
        lifecycle=MachineLifecycle(boot_delay_seconds=0.05),
    )


@pytest.fixture
def static_driver(
    machine_repository: InMemoryMachineRepository,
    config_repository: InMemoryConfigRepository,
) -> StaticDriver:
    return StaticDriver(
        machine_repository=machine_repository,
        config_repository=config_repository,
    )


@pytest.fixture
def default_image() -> Image:
    return Image(
        id="image-1",
        name="Default",
        build_from=None,
        password=None,
        instances_size="medium",
    )
