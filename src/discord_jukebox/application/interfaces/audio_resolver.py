"""Port interfaces for resolving queries and opening audio streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from discord_jukebox.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import QueueEntry


class MediaResolver(ABC):
    """Interface for resolving URLs and search queries to playable entries."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "QueueEntry | None":
        """Resolve a query or URL to a playable entry, or None when nothing matches."""
        ...

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...


class AudioTransport(ABC):
    """Interface for turning an entry's source URL into a playable stream handle."""

    @abstractmethod
    async def open_stream(self, source_url: NonEmptyStr) -> Any:
        """Open a stream for *source_url*.

        Raises:
            StreamFailureError: The source could not be opened.
        """
        ...

    @abstractmethod
    def release(self, stream: Any) -> None:
        """Free a stream that was opened but never handed to a player."""
        ...
