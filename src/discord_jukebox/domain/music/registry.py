"""
Session Registry

Process-wide mapping from voice-channel identity to its playback Session.
It is the single source of truth for "is a session active here" and the only
state shared between channels.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator

from discord_jukebox.domain.music.entities import Session
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Awaitable[Session]]


class SessionRegistry:
    """In-memory registry of playback sessions keyed by voice channel ID.

    ``get_or_create`` serialises creation per channel with a dedicated lock,
    so two requests racing for the same empty channel share a single factory
    call while requests for other channels proceed untouched.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}

    def get(self, channel_id: int) -> Session | None:
        """Retrieve the session for a channel, or None if there is none."""
        return self._sessions.get(channel_id)

    async def get_or_create(self, channel_id: int, factory: SessionFactory) -> Session:
        """Get the channel's session, creating it with *factory* if absent.

        The factory must return a session whose connection is ready. If it
        raises, nothing is registered and the exception propagates to the
        caller that ran it.
        """
        existing = self._sessions.get(channel_id)
        if existing is not None:
            return existing

        lock = self._locks.setdefault(channel_id, asyncio.Lock())
        self._lock_users[channel_id] = self._lock_users.get(channel_id, 0) + 1
        try:
            async with lock:
                existing = self._sessions.get(channel_id)
                if existing is not None:
                    return existing

                logger.debug(LogTemplates.SESSION_CREATING, channel_id)
                session = await factory()
                self._sessions[channel_id] = session
                return session
        finally:
            self._release_lock(channel_id)

    def _release_lock(self, channel_id: int) -> None:
        """Forget the channel's creation lock once no caller holds or awaits it."""
        remaining = self._lock_users[channel_id] - 1
        if remaining:
            self._lock_users[channel_id] = remaining
            return
        del self._lock_users[channel_id]
        del self._locks[channel_id]

    def remove(self, channel_id: int, session: Session | None = None) -> bool:
        """Remove a channel's session.

        When *session* is given, the entry is only removed if it is that
        exact instance.
        """
        current = self._sessions.get(channel_id)
        if current is None or (session is not None and current is not session):
            return False

        del self._sessions[channel_id]
        return True

    def channel_ids(self) -> list[int]:
        return list(self._sessions)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))
