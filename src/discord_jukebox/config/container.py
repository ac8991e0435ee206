"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the session registry, adapters and services.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioTransport
    from ..application.interfaces.voice_adapter import VoiceGateway
    from ..application.services.idle_monitor import IdleChannelMonitor
    from ..application.services.playback_controller import PlaybackController
    from ..domain.music.registry import SessionRegistry
    from ..infrastructure.audio.ytdlp_resolver import YtDlpMediaResolver
    from ..infrastructure.web.liveness import LivenessServer
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Domain
    _session_registry: SessionRegistry | None = None

    # Infrastructure adapters
    _voice_gateway: VoiceGateway | None = None
    _media_resolver: YtDlpMediaResolver | None = None
    _audio_transport: AudioTransport | None = None
    _liveness_server: LivenessServer | None = None

    # Application services
    _playback_controller: PlaybackController | None = None
    _idle_monitor: IdleChannelMonitor | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Domain ===

    @property
    def session_registry(self) -> SessionRegistry:
        """Get the process-wide session registry."""
        if self._session_registry is None:
            from ..domain.music.registry import SessionRegistry

            self._session_registry = SessionRegistry()
        return self._session_registry

    # === Infrastructure Adapters ===

    @property
    def voice_gateway(self) -> VoiceGateway:
        """Get the Discord voice gateway."""
        if self._voice_gateway is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway

            self._voice_gateway = DiscordVoiceGateway(self.bot, self.settings.audio)
        return self._voice_gateway

    @property
    def media_resolver(self) -> YtDlpMediaResolver:
        """Get the yt-dlp media resolver."""
        if self._media_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpMediaResolver

            self._media_resolver = YtDlpMediaResolver(self.settings.audio)
        return self._media_resolver

    @property
    def audio_transport(self) -> AudioTransport:
        """Get the FFmpeg audio transport."""
        if self._audio_transport is None:
            from ..infrastructure.audio.ffmpeg_transport import FFmpegAudioTransport

            self._audio_transport = FFmpegAudioTransport(self.media_resolver, self.settings.audio)
        return self._audio_transport

    @property
    def liveness_server(self) -> LivenessServer:
        """Get the HTTP liveness server."""
        if self._liveness_server is None:
            from ..infrastructure.web.liveness import LivenessServer

            self._liveness_server = LivenessServer(self.settings.liveness)
        return self._liveness_server

    # === Application Services ===

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller."""
        if self._playback_controller is None:
            from ..application.services.playback_controller import PlaybackController

            self._playback_controller = PlaybackController(
                registry=self.session_registry,
                voice_gateway=self.voice_gateway,
                media_resolver=self.media_resolver,
                audio_transport=self.audio_transport,
                connect_timeout=self.settings.playback.connect_timeout_seconds,
                queue_view_limit=self.settings.playback.queue_view_limit,
                on_session_opened=self._session_opened,
            )
        return self._playback_controller

    @property
    def idle_monitor(self) -> IdleChannelMonitor:
        """Get the idle channel monitor."""
        if self._idle_monitor is None:
            from ..application.services.idle_monitor import IdleChannelMonitor

            self._idle_monitor = IdleChannelMonitor(
                registry=self.session_registry,
                voice_gateway=self.voice_gateway,
                teardown=self.playback_controller.teardown,
                grace_seconds=self.settings.playback.idle_grace_seconds,
            )
        return self._idle_monitor

    def _session_opened(self, channel_id: int) -> None:
        """Evaluate occupancy for a channel the bot has just joined."""
        self.idle_monitor.on_occupancy_changed(channel_id)

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Start background resources."""
        if self.settings.liveness.enabled:
            await self.liveness_server.start()

    async def shutdown(self) -> None:
        """Tear down every session and stop background resources."""
        if self._idle_monitor is not None:
            await self._idle_monitor.shutdown()

        if self._playback_controller is not None:
            try:
                await self._playback_controller.shutdown()
            except Exception as exc:
                logger.warning("Failed tearing down sessions: %r", exc)

        if self._liveness_server is not None:
            await self._liveness_server.stop()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
