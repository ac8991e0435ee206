"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class SessionState(Enum):
    """Session state with enforced transitions.

    State transitions:
    - DISCONNECTED -> CONNECTING (first play for a channel)
    - CONNECTING -> IDLE (transport ready) or DISCONNECTED (timeout/error)
    - IDLE -> PLAYING (dispatch)
    - PLAYING <-> PAUSED (pause/resume)
    - PLAYING/PAUSED -> PLAYING (advance to the next queued entry)
    - PLAYING/PAUSED -> IDLE (queue exhausted)
    - Any active -> ERROR_RECOVERING -> PLAYING or IDLE (stream/player error)
    - Any -> DISCONNECTED (stop, idle teardown, transport lost)
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR_RECOVERING = "error_recovering"

    def can_transition_to(self, target: SessionState) -> bool:
        """Check if transition to target state is valid."""
        if target is SessionState.DISCONNECTED:
            return True

        valid_transitions = {
            SessionState.DISCONNECTED: {SessionState.CONNECTING},
            SessionState.CONNECTING: {SessionState.IDLE},
            SessionState.IDLE: {SessionState.PLAYING},
            SessionState.PLAYING: {
                SessionState.PAUSED,
                SessionState.PLAYING,
                SessionState.IDLE,
                SessionState.ERROR_RECOVERING,
            },
            SessionState.PAUSED: {
                SessionState.PLAYING,
                SessionState.IDLE,
                SessionState.ERROR_RECOVERING,
            },
            SessionState.ERROR_RECOVERING: {SessionState.PLAYING, SessionState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        """Whether an entry is handed to the player (playing or paused)."""
        return self in {SessionState.PLAYING, SessionState.PAUSED}

    @property
    def is_live(self) -> bool:
        """Whether the session still owns a usable connection."""
        return self not in {SessionState.DISCONNECTED, SessionState.CONNECTING}


class PlayerStatus(Enum):
    """Status reported by an audio player handle."""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class SessionEndReason(Enum):
    """Reasons a session can be torn down."""

    STOP_COMMAND = "stop_command"
    IDLE_TIMEOUT = "idle_timeout"
    CONNECTION_LOST = "connection_lost"
    SHUTDOWN = "shutdown"
