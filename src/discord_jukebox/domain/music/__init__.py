"""
Music Bounded Context

Domain logic for queue entries, per-channel playback sessions and the
registry that tracks them.
"""

from discord_jukebox.domain.music.entities import QueueEntry, Session
from discord_jukebox.domain.music.registry import SessionRegistry
from discord_jukebox.domain.music.value_objects import (
    PlayerStatus,
    SessionEndReason,
    SessionState,
)

__all__ = [
    # Entities
    "QueueEntry",
    "Session",
    # Value Objects
    "SessionState",
    "PlayerStatus",
    "SessionEndReason",
    # Registry
    "SessionRegistry",
]
