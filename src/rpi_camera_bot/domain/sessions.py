"""Domain models for per-user chat sessions."""

from dataclasses import dataclass, replace
from enum import Enum


class SessionStatus(Enum):
    """Conversation state of a session."""

    WAITING = "waiting"


@dataclass(frozen=True)
class Session:
    """Represents the in-memory state of one authorized user."""

    user_id: str
    status: SessionStatus = SessionStatus.WAITING
    last_update_id: int = -1

    def with_update(self, update_id: int) -> "Session":
        """Return a copy that has seen the given update id."""
        return replace(self, last_update_id=update_id)
