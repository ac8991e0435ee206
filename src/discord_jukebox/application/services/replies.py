"""Reply DTOs returned by the playback controller to the command gateway."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import QueueEntry
from ...domain.shared.messages import DiscordUIMessages
from ...domain.shared.types import QueuePositionInt


class ReplyStatus(Enum):
    """Outcome codes for user commands."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    SKIPPED = "skipped"
    STOPPED = "stopped"
    PAUSED = "paused"
    RESUMED = "resumed"
    QUEUE_VIEW = "queue_view"
    HELP = "help"

    ALREADY_PAUSED = "already_paused"
    NOT_PAUSED = "not_paused"
    NOTHING_TO_SKIP = "nothing_to_skip"
    NOTHING_PLAYING = "nothing_playing"
    QUEUE_EMPTY = "queue_empty"
    NO_ACTIVE_SESSION = "no_active_session"
    SESSION_CLOSING = "session_closing"

    NOT_IN_VOICE_CHANNEL = "not_in_voice_channel"
    PERMISSION_DENIED = "permission_denied"
    CONNECTION_FAILED = "connection_failed"
    TRACK_NOT_FOUND = "track_not_found"
    PLAYBACK_FAILED = "playback_failed"


_INFORMATIONAL = {
    ReplyStatus.ALREADY_PAUSED,
    ReplyStatus.NOT_PAUSED,
    ReplyStatus.NOTHING_TO_SKIP,
    ReplyStatus.NOTHING_PLAYING,
    ReplyStatus.QUEUE_EMPTY,
    ReplyStatus.NO_ACTIVE_SESSION,
    ReplyStatus.SESSION_CLOSING,
    ReplyStatus.NOT_IN_VOICE_CHANNEL,
}


class CommandReply(BaseModel):
    """User-facing result of a single command."""

    model_config = ConfigDict(frozen=True)

    status: ReplyStatus
    message: str
    entry: QueueEntry | None = None
    position: QueuePositionInt | None = None
    ephemeral: bool = False

    @property
    def is_success(self) -> bool:
        return self.status in {
            ReplyStatus.NOW_PLAYING,
            ReplyStatus.QUEUED,
            ReplyStatus.SKIPPED,
            ReplyStatus.STOPPED,
            ReplyStatus.PAUSED,
            ReplyStatus.RESUMED,
            ReplyStatus.QUEUE_VIEW,
            ReplyStatus.HELP,
        }

    @classmethod
    def now_playing(cls, entry: QueueEntry) -> CommandReply:
        return cls(
            status=ReplyStatus.NOW_PLAYING,
            message=DiscordUIMessages.NOW_PLAYING.format(title=entry.title),
            entry=entry,
        )

    @classmethod
    def queued(cls, entry: QueueEntry, position: int) -> CommandReply:
        return cls(
            status=ReplyStatus.QUEUED,
            message=DiscordUIMessages.QUEUED.format(title=entry.title, position=position),
            entry=entry,
            position=position,
        )

    @classmethod
    def skipped(cls, entry: QueueEntry, queue_empty: bool) -> CommandReply:
        template = DiscordUIMessages.SKIPPED_QUEUE_EMPTY if queue_empty else DiscordUIMessages.SKIPPED
        return cls(
            status=ReplyStatus.SKIPPED,
            message=template.format(title=entry.title),
            entry=entry,
        )

    @classmethod
    def info(cls, status: ReplyStatus, message: str) -> CommandReply:
        """Build a reply for an informational or error outcome."""
        return cls(status=status, message=message, ephemeral=status in _INFORMATIONAL)

    @classmethod
    def simple(cls, status: ReplyStatus, message: str) -> CommandReply:
        return cls(status=status, message=message)
