"""Client for the session-tracking endpoint of a machine."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from cloud_drivers.domain.sessions import SessionState


class SessionClient(Protocol):
    """Interface for polling and driving remote sessions."""

    async def list_sessions(self, user: str = "Administrator") -> list[SessionState]:
        """Return the sessions reported by the endpoint."""

    async def close_session(self, user: str) -> None:
        """Close the session of a user."""

    async def open_session(self, user: str) -> None:
        """Open or refresh the session of a user."""


@dataclass
class HttpxSessionClient(SessionClient):
    """Session client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, host: str, port: int) -> "HttpxSessionClient":
        """Create a session client with a managed httpx session."""
        return cls(base_url=f"http://{host}:{port}", http_client=httpx.AsyncClient())

    async def list_sessions(self, user: str = "Administrator") -> list[SessionState]:
        """List sessions and parse the row payload."""
        response = await self.http_client.get(
            f"{self.base_url}/sessions/{user}", timeout=10
        )
        response.raise_for_status()
        rows = response.json().get("data", [])
        return [
            SessionState(user=str(row[1]), active=row[3] == "Active") for row in rows
        ]

    async def close_session(self, user: str) -> None:
        """Close the session of a user."""
        response = await self.http_client.delete(
            f"{self.base_url}/sessions/{user}", timeout=10
        )
        response.raise_for_status()

    async def open_session(self, user: str) -> None:
        """Open the session of a user."""
        response = await self.http_client.post(
            f"{self.base_url}/sessionOpen", json={"username": user}, timeout=10
        )
        response.raise_for_status()

    async def close_default_session(self) -> None:
        """Deactivate the endpoint's default session."""
        response = await self.http_client.post(
            f"{self.base_url}/sessionClose", timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
