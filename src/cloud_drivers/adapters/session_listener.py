"""Local HTTP listener emulating a remote session-tracking endpoint."""

import asyncio
import logging
from dataclasses import dataclass, field

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

from cloud_drivers.domain.sessions import SessionState

DEFAULT_SESSION_USER = "username"
ADMIN_USER = "Administrator"

_logger = logging.getLogger(__name__)


class SessionOpenRequest(BaseModel):
    """Body of a session open request."""

    username: str


@dataclass
class SessionTable:
    """Session states tracked by one listener."""

    sessions: list[SessionState] = field(
        default_factory=lambda: [SessionState(user=DEFAULT_SESSION_USER)]
    )

    def find(self, user: str) -> SessionState | None:
        """Return the session of a user, if present."""
        for session in self.sessions:
            if session.user == user:
                return session
        return None

    def rows(self) -> list[list[object]]:
        """Return all sessions in listing shape."""
        return [session.as_row() for session in self.sessions]

    def open(self, user: str | None = None) -> None:
        """Mark a user's session active, creating it when missing."""
        default = self.find(DEFAULT_SESSION_USER)
        if user is None:
            if default is None:
                self.sessions.append(SessionState(DEFAULT_SESSION_USER, active=True))
            else:
                default.active = True
            return
        if default is not None:
            default.active = False
        session = self.find(user)
        if session is None:
            self.sessions.append(SessionState(user=user, active=True))
        else:
            session.active = True

    def close(self, user: str) -> None:
        """Close a session; closing the admin session deactivates the default."""
        if user == ADMIN_USER:
            self.close_default()
            return
        self.sessions = [session for session in self.sessions if session.user != user]

    def close_default(self) -> None:
        """Mark the default session inactive."""
        default = self.find(DEFAULT_SESSION_USER)
        if default is not None:
            default.active = False


def create_session_app(table: SessionTable) -> FastAPI:
    """Create the listener app serving a session table."""
    app = FastAPI()

    @app.get("/sessions/{user}")
    async def list_sessions(user: str) -> dict[str, object]:
        """List every tracked session."""
        return {"data": table.rows()}

    @app.delete("/sessions/{user}")
    async def close_session(user: str) -> dict[str, str]:
        """Close the session of a user."""
        table.close(user)
        return {"status": "ok"}

    @app.post("/sessionOpen")
    async def open_session(
        payload: SessionOpenRequest | None = None,
    ) -> dict[str, str]:
        """Open or refresh the session of the posted user."""
        table.open(payload.username if payload is not None else None)
        return {"status": "ok"}

    @app.post("/sessionClose")
    async def close_default_session() -> dict[str, str]:
        """Deactivate the default session."""
        table.close_default()
        return {"status": "ok"}

    return app


@dataclass
class SessionListener:
    """Serves a session table on an ephemeral local port."""

    host: str = "127.0.0.1"
    table: SessionTable = field(default_factory=SessionTable)
    startup_timeout_seconds: float = 5.0
    _server: uvicorn.Server | None = None
    _task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start serving and wait until the port is bound."""
        config = uvicorn.Config(
            create_session_app(self.table),
            host=self.host,
            port=0,
            log_level="warning",
            lifespan="off",
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve())
        try:
            async with asyncio.timeout(self.startup_timeout_seconds):
                while not server.started:
                    if task.done():
                        task.result()
                        raise RuntimeError("Session listener exited during startup")
                    await asyncio.sleep(0.01)
        except TimeoutError:
            server.should_exit = True
            await task
            raise RuntimeError("Session listener did not start in time") from None
        self._server = server
        self._task = task
        _logger.info("Session listener bound to %s:%s", self.host, self.port)

    @property
    def running(self) -> bool:
        """Return whether the listener is serving."""
        return self._task is not None and not self._task.done()

    @property
    def port(self) -> int:
        """Return the bound port."""
        if self._server is None:
            raise RuntimeError("Session listener is not running")
        socket = self._server.servers[0].sockets[0]
        return socket.getsockname()[1]

    async def stop(self) -> None:
        """Stop serving and wait for the server to exit."""
        if self._server is None or self._task is None:
            return
        self._server.should_exit = True
        await self._task
        self._server = None
        self._task = None
