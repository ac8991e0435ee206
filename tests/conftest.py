import asyncio
from typing import Any

import pytest

from discord_jukebox.application.interfaces.audio_resolver import AudioTransport, MediaResolver
from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    StreamEndCallback,
    VoiceConnection,
    VoiceGateway,
)
from discord_jukebox.application.services.playback_controller import PlaybackController
from discord_jukebox.domain.music.entities import QueueEntry
from discord_jukebox.domain.music.registry import SessionRegistry
from discord_jukebox.domain.music.value_objects import PlayerStatus
from discord_jukebox.domain.shared.exceptions import StreamFailureError


# ============================================================================
# Transport Fakes
# ============================================================================


class FakePlayer(AudioPlayer):
    """In-memory player mirroring the voice client's stop semantics.

    ``stop`` only ends a stream that is playing or paused. End callbacks fire
    inline unless ``deferred`` is set, in which case they are scheduled as
    tasks the way the discord.py player thread hands them to the loop.
    """

    def __init__(self) -> None:
        self.played: list[Any] = []
        self.fail_play: Exception | None = None
        self.stop_calls = 0
        self.deferred = False
        self.pending: list[asyncio.Task[None]] = []
        self._on_end: StreamEndCallback | None = None
        self._status = PlayerStatus.IDLE

    async def play(self, stream: Any, on_end: StreamEndCallback) -> None:
        if self.fail_play is not None:
            raise self.fail_play
        self.played.append(stream)
        self._on_end = on_end
        self._status = PlayerStatus.PLAYING

    async def pause(self) -> None:
        if self._status is PlayerStatus.PLAYING:
            self._status = PlayerStatus.PAUSED

    async def unpause(self) -> None:
        if self._status is PlayerStatus.PAUSED:
            self._status = PlayerStatus.PLAYING

    async def stop(self) -> None:
        self.stop_calls += 1
        if self._status is not PlayerStatus.IDLE:
            await self.finish()

    async def finish(self, error: BaseException | None = None) -> None:
        """Simulate the current stream ending, naturally or with *error*."""
        on_end, self._on_end = self._on_end, None
        self._status = PlayerStatus.IDLE
        if on_end is None:
            return
        if self.deferred:
            self.pending.append(asyncio.create_task(on_end(error)))
        else:
            await on_end(error)

    async def settle(self) -> None:
        """Run scheduled end callbacks, including ones they schedule in turn."""
        while self.pending:
            tasks, self.pending = self.pending, []
            await asyncio.gather(*tasks)

    @property
    def status(self) -> PlayerStatus:
        return self._status


class FakeConnection(VoiceConnection):
    def __init__(self, channel_id: int, ready_error: Exception | None = None) -> None:
        self.channel_id = channel_id
        self.ready_error = ready_error
        self.player: AudioPlayer | None = None
        self.destroy_calls = 0

    async def wait_ready(self, timeout: float) -> None:
        await asyncio.sleep(0)
        if self.ready_error is not None:
            raise self.ready_error

    def subscribe(self, player: AudioPlayer) -> None:
        self.player = player

    async def destroy(self) -> None:
        self.destroy_calls += 1

    @property
    def is_alive(self) -> bool:
        return self.destroy_calls == 0


class FakeGateway(VoiceGateway):
    def __init__(self) -> None:
        self.permitted = True
        self.ready_error: Exception | None = None
        self.alone: set[int] = set()
        self.connections: list[FakeConnection] = []
        self.players: list[FakePlayer] = []

    def can_connect_and_speak(self, channel_id: int) -> bool:
        return self.permitted

    def connect(self, channel_id: int) -> FakeConnection:
        connection = FakeConnection(channel_id, self.ready_error)
        self.connections.append(connection)
        return connection

    def create_player(self) -> FakePlayer:
        player = FakePlayer()
        self.players.append(player)
        return player

    def is_bot_alone(self, channel_id: int) -> bool:
        return channel_id in self.alone


# ============================================================================
# Audio Fakes
# ============================================================================


def url_for(title: str) -> str:
    return "https://www.youtube.com/watch?v=" + title.lower().replace(" ", "-")


class FakeResolver(MediaResolver):
    """Resolves any query to an entry titled after it, except ``missing`` ones."""

    def __init__(self) -> None:
        self.missing: set[str] = set()
        self.queries: list[str] = []

    async def resolve(self, query: str) -> QueueEntry | None:
        self.queries.append(query)
        if query in self.missing:
            return None
        return QueueEntry(source_url=url_for(query), title=query, duration_seconds=180)

    def is_url(self, query: str) -> bool:
        return query.startswith("http")


class FakeTransport(AudioTransport):
    """Opens streams instantly unless a URL is ``failing`` or held behind a gate."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.released: list[Any] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.opening: set[str] = set()

    def hold(self, source_url: str) -> asyncio.Event:
        """Block ``open_stream`` for *source_url* until the returned event is set."""
        gate = self.gates[source_url] = asyncio.Event()
        return gate

    async def open_stream(self, source_url: str) -> Any:
        gate = self.gates.get(source_url)
        if gate is not None:
            self.opening.add(source_url)
            await gate.wait()
            self.opening.discard(source_url)
        if source_url in self.failing:
            raise StreamFailureError(source_url)
        return f"stream:{source_url}"

    def release(self, stream: Any) -> None:
        self.released.append(stream)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def controller(registry, gateway, resolver, transport):
    return PlaybackController(
        registry=registry,
        voice_gateway=gateway,
        media_resolver=resolver,
        audio_transport=transport,
        connect_timeout=0.5,
        queue_view_limit=3,
    )


@pytest.fixture
def sample_entry():
    return QueueEntry(
        source_url="https://www.youtube.com/watch?v=test123",
        title="Test Track",
        duration_seconds=180,
    )
