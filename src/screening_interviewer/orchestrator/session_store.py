"""
Session store.

Keeps one InterviewSession per candidate identity for the lifetime of the
interview. Turns for the same candidate are serialized through a per-key
lock; different candidates proceed independently.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from screening_interviewer.orchestrator.interview_state import InterviewSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], InterviewSession]


class SessionStoreBase(ABC):
    """Abstract keyed store of interview sessions."""

    @abstractmethod
    def get(self, candidate_id: str) -> InterviewSession | None:
        """Return the live session for ``candidate_id``, if any."""
        ...

    @abstractmethod
    def get_or_create(self, candidate_id: str) -> tuple[InterviewSession, bool]:
        """
        Return the session for ``candidate_id``, creating it on first contact.

        Returns:
            The session and whether it was just created.
        """
        ...

    @abstractmethod
    def put(self, session: InterviewSession) -> None:
        """Store ``session`` under its candidate id, replacing any existing one."""
        ...

    @abstractmethod
    def delete(self, candidate_id: str) -> None:
        """Destroy the session for ``candidate_id``."""
        ...

    @abstractmethod
    def lock(self, candidate_id: str):
        """Async context manager serializing turns for ``candidate_id``."""
        ...


class InMemorySessionStore(SessionStoreBase):
    """
    Process-local session store.

    Sessions idle longer than ``idle_timeout`` seconds are dropped the next
    time their identity is looked up, or when ``purge_expired`` runs.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        idle_timeout: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Builds a fresh session for a candidate id.
            idle_timeout: Seconds of inactivity before expiry (0 disables).
            clock: Monotonic clock, injectable for tests.
        """
        self._session_factory = session_factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[str, InterviewSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._sessions

    def _is_expired(self, session: InterviewSession) -> bool:
        if not self._idle_timeout:
            return False
        return self._clock() - session.last_activity > self._idle_timeout

    def get(self, candidate_id: str) -> InterviewSession | None:
        session = self._sessions.get(candidate_id)
        if session is not None and self._is_expired(session):
            logger.warning(f"Session for {candidate_id} expired after inactivity")
            self.delete(candidate_id)
            return None
        return session

    def get_or_create(self, candidate_id: str) -> tuple[InterviewSession, bool]:
        session = self.get(candidate_id)
        if session is not None:
            return session, False

        session = self._session_factory(candidate_id)
        session.touch(self._clock())
        self._sessions[candidate_id] = session
        logger.info(f"Created interview session for {candidate_id}")
        return session, True

    def put(self, session: InterviewSession) -> None:
        self._sessions[session.candidate_id] = session

    def delete(self, candidate_id: str) -> None:
        if self._sessions.pop(candidate_id, None) is not None:
            logger.info(f"Destroyed interview session for {candidate_id}")
        self._release_lock_entry(candidate_id)

    def purge_expired(self) -> list[str]:
        """
        Drop every idle session.

        Returns:
            Candidate ids whose sessions were removed.
        """
        expired = [cid for cid, s in self._sessions.items() if self._is_expired(s)]
        for candidate_id in expired:
            logger.warning(f"Session for {candidate_id} expired after inactivity")
            self.delete(candidate_id)
        return expired

    @property
    def tracked_locks(self) -> int:
        """Number of per-candidate locks currently held in memory."""
        return len(self._locks)

    def _release_lock_entry(self, candidate_id: str) -> None:
        # Dropped only once nobody holds or awaits it and the session is gone.
        if self._lock_users.get(candidate_id, 0) == 0 and candidate_id not in self._sessions:
            self._locks.pop(candidate_id, None)
            self._lock_users.pop(candidate_id, None)

    @asynccontextmanager
    async def lock(self, candidate_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(candidate_id, asyncio.Lock())
        self._lock_users[candidate_id] = self._lock_users.get(candidate_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[candidate_id] -= 1
            self._release_lock_entry(candidate_id)
