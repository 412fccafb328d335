"""Supabase-backed machine repository."""

import asyncio
from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from cloud_drivers.domain.machines import Machine, MachineSpec, MachineStatus
from cloud_drivers.drivers.base import MachineRepository

_COLUMNS = (
    "id, name, type, flavor, ip, username, password, plazaport, domain, "
    "rdp_port, image, status, created_at, destroyed_at"
)


@dataclass
class SupabaseMachineRepository(MachineRepository):
    """Supabase implementation for machine records."""

    client: Client

    async def create(self, spec: MachineSpec, driver: str) -> Machine:
        """Insert a machine row and return it."""
        query = self.client.table("machines").insert(
            {
                "name": spec.name,
                "type": driver,
                "flavor": spec.flavor,
                "ip": spec.ip,
                "username": spec.username,
                "password": spec.password,
                "plazaport": spec.plaza_port,
                "domain": spec.domain,
                "rdp_port": spec.rdp_port,
            }
        )
        response = await asyncio.to_thread(query.execute)
        if not response.data:
            raise RuntimeError("Failed to create machine in Supabase")
        return _row_to_machine(response.data[0])

    async def get(self, machine_id: str) -> Machine | None:
        """Return a machine by id, if present."""
        query = (
            self.client.table("machines")
            .select(_COLUMNS)
            .eq("id", machine_id)
            .limit(1)
        )
        response = await asyncio.to_thread(query.execute)
        if response.data:
            return _row_to_machine(response.data[0])
        return None


def _row_to_machine(row: dict[str, object]) -> Machine:
    status = row.get("status")
    return Machine(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        type=str(row.get("type", "")),
        flavor=row.get("flavor"),
        ip=row.get("ip"),
        username=row.get("username"),
        password=row.get("password"),
        plaza_port=row.get("plazaport"),
        domain=row.get("domain") or "",
        rdp_port=int(row.get("rdp_port") or 3389),
        image_id=row.get("image"),
        status=MachineStatus(status) if status else None,
        created_at=_parse_timestamp(row.get("created_at")),
        destroyed_at=_parse_timestamp(row.get("destroyed_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
