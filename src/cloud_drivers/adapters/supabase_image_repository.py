"""Supabase-backed image repository."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from cloud_drivers.drivers.base import ImageRepository


@dataclass
class SupabaseImageRepository(ImageRepository):
    """Supabase implementation for image records."""

    client: Client

    async def set_default_size(self, name: str, instances_size: str) -> None:
        """Update the instances size of the named image."""
        query = (
            self.client.table("images")
            .update({"instances_size": instances_size})
            .eq("name", name)
        )
        await asyncio.to_thread(query.execute)
