"""Session binding between a transport caller and a participant identity."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from .timestamps import utc_now_iso

logger = logging.getLogger(__name__)


class SessionError(ValueError):
    """Raised when an operation needs a joined session and none is bound."""


@dataclass(frozen=True)
class Session:
    session_id: str
    identity: str
    opened_at: str


@dataclass
class _SessionEntry:
    session: Session
    last_seen: float


class SessionStore:
    """Sessions per channel, dropped after ``ttl_seconds`` without any call.

    Polling clients never announce that they went away, so an idle session is
    treated as a disconnect. ``expire_idle`` reports the identities that lost
    their last session so the caller can release their queues.
    """

    def __init__(
        self,
        channel: str,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._channel = channel
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _SessionEntry] = {}
        self._lock = asyncio.Lock()

    async def open(self, identity: str) -> Session:
        session = Session(
            session_id=f"ses_{uuid.uuid4().hex}",
            identity=identity,
            opened_at=utc_now_iso(),
        )
        async with self._lock:
            shared = any(entry.session.identity == identity for entry in self._entries.values())
            self._entries[session.session_id] = _SessionEntry(session, self._clock())
        if shared:
            logger.warning(
                "[%s] identity %s is already bound to another session; queues are shared",
                self._channel,
                identity,
            )
        return session

    async def resolve(self, session_id: str | None) -> Session:
        session = await self.lookup(session_id)
        if session is None:
            raise SessionError(f"You must join the {self._channel} first")
        return session

    async def lookup(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        async with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            entry.last_seen = self._clock()
            return entry.session

    async def close(self, session_id: str) -> tuple[Session | None, bool]:
        """Drop a session; the flag tells whether it was the identity's last one."""
        async with self._lock:
            entry = self._entries.pop(session_id, None)
            if entry is None:
                return None, False
            identity = entry.session.identity
            remaining = any(other.session.identity == identity for other in self._entries.values())
            return entry.session, not remaining

    async def expire_idle(self) -> list[str]:
        """Drop idle sessions and return identities left without any session."""
        if self._ttl is None:
            return []
        async with self._lock:
            cutoff = self._clock() - self._ttl
            expired = [entry.session for entry in self._entries.values() if entry.last_seen <= cutoff]
            for session in expired:
                del self._entries[session.session_id]
            live = {entry.session.identity for entry in self._entries.values()}
        if expired:
            logger.info("[%s] expired %d idle sessions", self._channel, len(expired))
        return sorted({session.identity for session in expired} - live)


def normalize_identity(value: object, *, field: str = "username") -> str:
    if not isinstance(value, str) or not value.strip():
        raise SessionError(f"{field} is required")
    return value.strip()
