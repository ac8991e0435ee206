"""Port interfaces for voice connections and audio players."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from discord_jukebox.domain.music.value_objects import PlayerStatus

StreamEndCallback = Callable[[BaseException | None], Awaitable[None]]
"""Invoked once per played stream: ``None`` on natural end or stop, the error otherwise."""


class AudioPlayer(ABC):
    """Audio-playback pipeline for one session."""

    @abstractmethod
    async def play(self, stream: Any, on_end: StreamEndCallback) -> None:
        """Start playing *stream*; *on_end* fires exactly once when it finishes."""
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def unpause(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop the current stream. The stream's end callback still fires."""
        ...

    @property
    @abstractmethod
    def status(self) -> PlayerStatus:
        ...


class VoiceConnection(ABC):
    """Voice transport link to one channel."""

    @abstractmethod
    async def wait_ready(self, timeout: float) -> None:
        """Wait for the transport to become ready.

        Raises:
            ConnectionTimeoutError: The link was not ready within *timeout*
                seconds or the transport failed while connecting.
        """
        ...

    @abstractmethod
    def subscribe(self, player: AudioPlayer) -> None:
        """Route the player's audio into this connection for its whole lifetime."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Tear the link down. Safe to call more than once."""
        ...

    @property
    @abstractmethod
    def is_alive(self) -> bool:
        ...


class VoiceGateway(ABC):
    """Factory and occupancy view for voice channels."""

    @abstractmethod
    def can_connect_and_speak(self, channel_id: int) -> bool:
        """Whether the bot holds Connect and Speak permissions in the channel."""
        ...

    @abstractmethod
    def connect(self, channel_id: int) -> VoiceConnection:
        """Create a not-yet-ready connection handle for the channel."""
        ...

    @abstractmethod
    def create_player(self) -> AudioPlayer:
        ...

    @abstractmethod
    def is_bot_alone(self, channel_id: int) -> bool:
        """Whether the bot is the only remaining member of the channel."""
        ...
