"""Supabase-backed usage history."""

import asyncio
from dataclasses import dataclass
from decimal import Decimal

from supabase import Client

from cloud_drivers.domain.billing import UsageRecord
from cloud_drivers.services.billing import UsageHistorySource


@dataclass
class SupabaseUsageRepository(UsageHistorySource):
    """Reads per-user machine usage history."""

    client: Client

    async def get_history(self, user_id: str, backend: str) -> list[UsageRecord]:
        """Return the user's usage records for a backend, oldest first."""
        query = (
            self.client.table("machine_history")
            .select("type, time")
            .eq("user_id", user_id)
            .eq("driver", backend)
            .order("started_at")
        )
        response = await asyncio.to_thread(query.execute)
        return [
            UsageRecord(instance_type=str(row["type"]), time=Decimal(str(row["time"])))
            for row in response.data or []
        ]
