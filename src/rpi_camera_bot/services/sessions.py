"""In-memory session store for authorized users."""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager

from rpi_camera_bot.domain.sessions import Session

SessionMutator = Callable[[Session], Session]


class SessionTransaction:
    """View of the store that is valid while the store lock is held."""

    def __init__(self, sessions: dict[str, Session]) -> None:
        self._sessions = sessions

    def get(self, user_id: str) -> Session | None:
        """Return the session for a user, if present."""
        return self._sessions.get(user_id)

    def upsert(self, user_id: str, mutator: SessionMutator) -> Session:
        """Apply a mutator to the user's session and store the result."""
        current = self._sessions.get(user_id) or Session(user_id=user_id)
        updated = mutator(current)
        self._sessions[user_id] = updated
        return updated


class SessionStore:
    """Session mapping guarded by a single lock.

    Sessions are created up front for every authorized user and are never
    removed, so a missing session means the user is not authorized.
    """

    def __init__(self, user_ids: Iterable[str]) -> None:
        self._sessions = {user_id: Session(user_id=user_id) for user_id in user_ids}
        self._lock = asyncio.Lock()

    def get(self, user_id: str) -> Session | None:
        """Return the session for a user, if present."""
        return self._sessions.get(user_id)

    async def upsert(self, user_id: str, mutator: SessionMutator) -> Session:
        """Atomically read, mutate and store a user's session."""
        async with self.transaction() as tx:
            return tx.upsert(user_id, mutator)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SessionTransaction]:
        """Hold the store lock for a multi-step read-modify-write."""
        async with self._lock:
            yield SessionTransaction(self._sessions)

    def snapshot(self) -> list[Session]:
        """Return all sessions ordered by user id."""
        return sorted(self._sessions.values(), key=lambda session: session.user_id)
