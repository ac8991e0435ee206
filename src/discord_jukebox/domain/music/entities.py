"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.value_objects import SessionState
from discord_jukebox.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
)
from discord_jukebox.domain.shared.messages import ErrorMessages
from discord_jukebox.domain.shared.types import (
    ChannelIdField,
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    TrackTitleStr,
    UtcDatetimeField,
    utcnow,
)


class QueueEntry(BaseModel):
    """Immutable value object representing one playable item."""

    model_config = ConfigDict(frozen=True, strict=True)

    source_url: NonEmptyStr
    title: TrackTitleStr
    duration_seconds: DurationSeconds = 0

    # Request metadata (set by the command gateway)
    requested_by: NonEmptyStr | None = None

    def with_requester(self, requested_by: str) -> QueueEntry:
        """Return a copy of this entry with requester metadata populated."""
        return self.model_copy(update={"requested_by": requested_by})


class Session(BaseModel):
    """Aggregate root managing playback state for a single voice channel.

    The session owns the connection and player handles for its whole
    lifetime. Every entry handed to the player bumps ``generation`` so that
    end-of-stream events belonging to an older slot can be told apart from
    the one currently playing.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    channel_id: ChannelIdField
    state: SessionState = SessionState.DISCONNECTED
    queue: list[QueueEntry] = Field(default_factory=list)
    current: QueueEntry | None = None
    generation: NonNegativeInt = 0
    streaming_generation: NonNegativeInt = 0
    skipped_generation: NonNegativeInt = 0

    connection: Any = Field(default=None, exclude=True, repr=False)
    player: Any = Field(default=None, exclude=True, repr=False)

    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def is_idle(self) -> bool:
        return self.state == SessionState.IDLE

    @property
    def is_playing(self) -> bool:
        return self.state == SessionState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state == SessionState.PAUSED

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.DISCONNECTED

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = utcnow()

    def transition_to(self, new_state: SessionState) -> None:
        """Transition to a new session state."""
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=f"Cannot transition from {self.state.value} to {new_state.value}",
            )

        self.state = new_state
        self.touch()

    def attach(self, connection: Any, player: Any) -> None:
        """Bind freshly created transport handles and enter CONNECTING."""
        self.connection = connection
        self.player = player
        self.transition_to(SessionState.CONNECTING)

    def mark_ready(self) -> None:
        self.transition_to(SessionState.IDLE)

    def contains(self, entry: QueueEntry) -> bool:
        """Check whether this exact entry instance is queued or current."""
        return entry is self.current or any(queued is entry for queued in self.queue)

    def enqueue(self, entry: QueueEntry) -> int:
        """Append an entry to the tail of the queue and return its 1-based position."""
        if self.contains(entry):
            raise BusinessRuleViolationError(
                rule="NO_DUPLICATE_INSTANCES",
                message=ErrorMessages.DUPLICATE_ENTRY.format(title=entry.title),
            )

        self.queue.append(entry)
        self.touch()
        return len(self.queue)

    def begin(self, entry: QueueEntry) -> int:
        """Hand an entry to the player slot and return the new generation."""
        self.transition_to(SessionState.PLAYING)
        self.current = entry
        self.generation += 1
        return self.generation

    @property
    def is_opening(self) -> bool:
        """Whether the current entry is still waiting for its stream to open."""
        return (
            self.state.is_active
            and self.current is not None
            and self.streaming_generation != self.generation
        )

    def mark_streaming(self, generation: int) -> None:
        self.streaming_generation = generation

    def skip_opening(self) -> None:
        """Flag the opening slot so its stream is discarded instead of played."""
        self.skipped_generation = self.generation

    def is_skipped(self, generation: int) -> bool:
        return generation == self.skipped_generation

    def is_current_slot(self, generation: int) -> bool:
        """Whether *generation* identifies the entry the player is working on."""
        return (
            not self.is_closed
            and self.current is not None
            and generation == self.generation
        )

    def mark_recovering(self) -> None:
        """Enter ERROR_RECOVERING after a stream or player error."""
        self.transition_to(SessionState.ERROR_RECOVERING)

    def advance(self) -> QueueEntry | None:
        """Dequeue the next entry for dispatch, or go idle when the queue is empty.

        The returned entry is not yet current; the caller passes it to
        :meth:`begin` once it is ready to hand it to the player.
        """
        if self.queue:
            entry = self.queue.pop(0)
            self.touch()
            return entry

        self.current = None
        if self.state != SessionState.IDLE:
            self.transition_to(SessionState.IDLE)
        return None

    def pause(self) -> None:
        self.transition_to(SessionState.PAUSED)

    def resume(self) -> None:
        self.transition_to(SessionState.PLAYING)

    def clear_queue(self) -> int:
        """Clear all pending entries and return the count removed."""
        count = len(self.queue)
        self.queue.clear()
        self.touch()
        return count

    def close(self) -> int:
        """Enter the terminal DISCONNECTED state, dropping queue and current entry."""
        dropped = self.clear_queue()
        self.current = None
        self.transition_to(SessionState.DISCONNECTED)
        return dropped
