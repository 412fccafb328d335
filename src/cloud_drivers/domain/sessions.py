"""Domain models for emulated remote sessions."""

from dataclasses import dataclass


@dataclass
class SessionState:
    """Session status of a user on the emulated control endpoint."""

    user: str
    active: bool = False

    def as_row(self) -> list[object]:
        """Return the row shape reported by the session listing."""
        return [None, self.user, None, "Active" if self.active else "Inactive"]
