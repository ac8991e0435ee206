"""
FFmpeg Audio Transport

Turns a queue entry's page URL into a discord.py audio source by looking up
a fresh stream URL with yt-dlp and piping it through FFmpeg.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import discord

from discord_jukebox.application.interfaces.audio_resolver import AudioTransport
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.exceptions import StreamFailureError
from discord_jukebox.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpMediaResolver

logger = logging.getLogger(__name__)


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    before_options: str = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    options: str = "-vn"

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        defaults = cls()
        return cls(
            before_options=settings.ffmpeg_options.get("before_options", defaults.before_options),
            options=settings.ffmpeg_options.get("options", defaults.options),
        )


class FFmpegAudioTransport(AudioTransport):
    """Open FFmpeg-backed PCM sources for page URLs."""

    def __init__(
        self,
        resolver: YtDlpMediaResolver,
        settings: AudioSettings | None = None,
        config: FFmpegConfig | None = None,
    ) -> None:
        self._resolver = resolver
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig.from_settings(self._settings)

    async def open_stream(self, source_url: str) -> discord.AudioSource:
        stream_url = await self._resolver.stream_url_for(source_url)
        if not stream_url:
            raise StreamFailureError(
                source_url, ErrorMessages.NO_STREAM_URL_FOR_ENTRY.format(source_url=source_url)
            )

        try:
            return discord.FFmpegPCMAudio(
                stream_url,
                before_options=self._config.before_options,
                options=self._config.options,
            )
        except (discord.ClientException, OSError) as exc:
            raise StreamFailureError(source_url, str(exc)) from exc

    def release(self, stream: Any) -> None:
        cleanup = getattr(stream, "cleanup", None)
        if callable(cleanup):
            try:
                cleanup()
            except Exception as exc:
                logger.debug("Failed to clean up unused audio source: %r", exc)
