"""Supabase-backed key-value configuration."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from cloud_drivers.drivers.base import ConfigRepository


@dataclass
class SupabaseConfigRepository(ConfigRepository):
    """Reads configuration values stored as key/value rows."""

    client: Client

    async def get(self, *keys: str) -> dict[str, object]:
        """Return the stored values for the requested keys."""
        query = self.client.table("configs").select("key, value").in_("key", list(keys))
        response = await asyncio.to_thread(query.execute)
        values: dict[str, object] = dict.fromkeys(keys)
        for row in response.data or []:
            values[str(row["key"])] = row.get("value")
        return values
