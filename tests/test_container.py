"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization and caching of every component
- Bot instance management (set_bot, bot property, error when not set)
- Wiring between the controller, monitor and adapters
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from discord_jukebox.application.services.idle_monitor import IdleChannelMonitor
from discord_jukebox.application.services.playback_controller import PlaybackController
from discord_jukebox.config.container import Container, create_container
from discord_jukebox.config.settings import (
    AudioSettings,
    LivenessSettings,
    PlaybackSettings,
    Settings,
)
from discord_jukebox.domain.music.registry import SessionRegistry
from discord_jukebox.domain.shared.messages import ErrorMessages
from discord_jukebox.infrastructure.audio.ffmpeg_transport import FFmpegAudioTransport
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpMediaResolver
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway
from discord_jukebox.infrastructure.web.liveness import LivenessServer


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        playback=PlaybackSettings(connect_timeout_seconds=2.0, idle_grace_seconds=7.0),
        audio=AudioSettings(),
        liveness=LivenessSettings(enabled=False),
    )


@pytest.fixture
def container(settings):
    return Container(settings=settings)


@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = 123456789
    return bot


# =============================================================================
# Container Initialization Tests
# =============================================================================


class TestContainerInitialization:
    def test_create_container_factory(self, settings):
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings

    def test_bot_not_set_raises(self, container):
        with pytest.raises(RuntimeError, match=ErrorMessages.BOT_NOT_INITIALIZED[:20]):
            _ = container.bot

    def test_set_bot(self, container, mock_bot):
        container.set_bot(mock_bot)
        assert container.bot is mock_bot


# =============================================================================
# Lazy Component Tests
# =============================================================================


class TestLazyComponents:
    def test_session_registry_cached(self, container):
        registry = container.session_registry

        assert isinstance(registry, SessionRegistry)
        assert container.session_registry is registry

    def test_voice_gateway_requires_bot(self, container, mock_bot):
        with pytest.raises(RuntimeError):
            _ = container.voice_gateway

        container.set_bot(mock_bot)
        assert isinstance(container.voice_gateway, DiscordVoiceGateway)

    def test_media_resolver_and_transport(self, container):
        assert isinstance(container.media_resolver, YtDlpMediaResolver)
        assert isinstance(container.audio_transport, FFmpegAudioTransport)
        assert container.audio_transport is container.audio_transport

    def test_liveness_server(self, container):
        assert isinstance(container.liveness_server, LivenessServer)

    def test_playback_controller_shares_registry(self, container, mock_bot):
        container.set_bot(mock_bot)

        controller = container.playback_controller

        assert isinstance(controller, PlaybackController)
        assert controller.registry is container.session_registry
        assert container.playback_controller is controller

    def test_idle_monitor_uses_settings_grace(self, container, mock_bot):
        container.set_bot(mock_bot)

        monitor = container.idle_monitor

        assert isinstance(monitor, IdleChannelMonitor)
        assert monitor._grace_seconds == 7.0
        assert monitor._teardown == container.playback_controller.teardown

    def test_opened_sessions_reach_idle_monitor(self, container, mock_bot):
        container.set_bot(mock_bot)
        controller = container.playback_controller
        assert container._idle_monitor is None

        with patch.object(IdleChannelMonitor, "on_occupancy_changed") as mock_changed:
            controller._on_session_opened(333333333)

        assert isinstance(container._idle_monitor, IdleChannelMonitor)
        mock_changed.assert_called_once_with(333333333)


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_skips_disabled_liveness(self, container):
        await container.initialize()
        assert container._liveness_server is None

    @pytest.mark.asyncio
    async def test_initialize_starts_liveness(self, settings):
        enabled = settings.model_copy(update={"liveness": LivenessSettings(enabled=True)})
        container = Container(settings=enabled)

        with patch.object(LivenessServer, "start", new_callable=AsyncMock) as mock_start:
            await container.initialize()

        mock_start.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_with_nothing_created(self, container):
        await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_order(self, container):
        calls = []
        container._idle_monitor = MagicMock()
        container._idle_monitor.shutdown = AsyncMock(side_effect=lambda: calls.append("monitor"))
        container._playback_controller = MagicMock()
        container._playback_controller.shutdown = AsyncMock(
            side_effect=lambda: calls.append("controller")
        )
        container._liveness_server = MagicMock()
        container._liveness_server.stop = AsyncMock(side_effect=lambda: calls.append("liveness"))

        await container.shutdown()

        assert calls == ["monitor", "controller", "liveness"]

    @pytest.mark.asyncio
    async def test_shutdown_continues_after_controller_failure(self, container):
        container._playback_controller = MagicMock()
        container._playback_controller.shutdown = AsyncMock(side_effect=RuntimeError("boom"))
        container._liveness_server = MagicMock()
        container._liveness_server.stop = AsyncMock()

        await container.shutdown()

        container._liveness_server.stop.assert_awaited_once()
