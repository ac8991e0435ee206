"""Discord voice adapters implementing the voice gateway, connection and player ports."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import discord

from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    StreamEndCallback,
    VoiceConnection,
    VoiceGateway,
)
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import PlayerStatus
from discord_jukebox.domain.shared.exceptions import ConnectionTimeoutError
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


class DiscordAudioPlayer(AudioPlayer):
    """Plays discord.py audio sources through the voice client of its connection."""

    def __init__(self, volume: float = 0.5) -> None:
        self._volume = volume
        self._connection: DiscordVoiceConnection | None = None

    def bind(self, connection: DiscordVoiceConnection) -> None:
        self._connection = connection

    def _voice_client(self) -> discord.VoiceClient | None:
        if self._connection is None:
            return None
        return self._connection.voice_client

    async def play(self, stream: Any, on_end: StreamEndCallback) -> None:
        vc = self._voice_client()
        if vc is None or not vc.is_connected():
            raise discord.ClientException("Not connected to voice")

        source = stream
        if not isinstance(source, discord.PCMVolumeTransformer):
            source = discord.PCMVolumeTransformer(stream, volume=self._volume)

        channel_id = self._connection.channel_id if self._connection else None
        loop = asyncio.get_running_loop()

        def after_callback(error: Exception | None = None) -> None:
            logger.debug(LogTemplates.PLAYBACK_TRACK_ENDED, channel_id, error)
            asyncio.run_coroutine_threadsafe(
                self._notify(on_end, error, channel_id),
                loop,
            )

        vc.play(source, after=after_callback)

    @staticmethod
    async def _notify(
        on_end: StreamEndCallback, error: BaseException | None, channel_id: int | None
    ) -> None:
        """Runs on the event loop after FFmpeg's reader thread finished a stream."""
        try:
            await on_end(error)
        except Exception as exc:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, channel_id, exc)

    async def pause(self) -> None:
        vc = self._voice_client()
        if vc is not None and vc.is_playing():
            vc.pause()

    async def unpause(self) -> None:
        vc = self._voice_client()
        if vc is not None and vc.is_paused():
            vc.resume()

    async def stop(self) -> None:
        vc = self._voice_client()
        if vc is not None and (vc.is_playing() or vc.is_paused()):
            vc.stop()

    @property
    def status(self) -> PlayerStatus:
        vc = self._voice_client()
        if vc is None:
            return PlayerStatus.IDLE
        if vc.is_paused():
            return PlayerStatus.PAUSED
        if vc.is_playing():
            return PlayerStatus.PLAYING
        return PlayerStatus.IDLE


class DiscordVoiceConnection(VoiceConnection):
    """One voice channel link, established lazily by :meth:`wait_ready`."""

    def __init__(self, channel: VoiceChannelLike) -> None:
        self._channel = channel
        self._voice_client: discord.VoiceClient | None = None
        self._destroyed = False

    @property
    def channel_id(self) -> int:
        return self._channel.id

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._voice_client

    def subscribe(self, player: AudioPlayer) -> None:
        if isinstance(player, DiscordAudioPlayer):
            player.bind(self)

    async def wait_ready(self, timeout: float) -> None:
        channel = self._channel
        try:
            async with asyncio.timeout(timeout):
                vc = await channel.connect(self_deaf=True, timeout=timeout)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id)
            raise ConnectionTimeoutError(channel.id, timeout) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel.id)
            raise ConnectionTimeoutError(channel.id, timeout, str(exc)) from exc
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, channel.id, exc)
            raise ConnectionTimeoutError(channel.id, timeout, str(exc)) from exc

        if not isinstance(vc, discord.VoiceClient):
            raise ConnectionTimeoutError(channel.id, timeout, "Unexpected voice protocol")

        self._voice_client = vc
        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, channel.guild.name)
        await self._ensure_self_deaf()

    async def _ensure_self_deaf(self) -> None:
        try:
            await self._channel.guild.change_voice_state(channel=self._channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, self._channel.id, exc)

    async def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True

        vc = self._voice_client
        if vc is None:
            # A connect that timed out can still leave a half-open client on the guild.
            guild_vc = self._channel.guild.voice_client
            if isinstance(guild_vc, discord.VoiceClient) and guild_vc.channel is not None:
                if guild_vc.channel.id == self._channel.id:
                    vc = guild_vc

        if vc is not None:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, self._channel.id)
        self._voice_client = None

    @property
    def is_alive(self) -> bool:
        return (
            not self._destroyed
            and self._voice_client is not None
            and self._voice_client.is_connected()
        )


class DiscordVoiceGateway(VoiceGateway):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()

    def _get_channel(self, channel_id: int) -> VoiceChannelLike | None:
        channel = self._bot.get_channel(channel_id)
        if isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            return channel
        return None

    def can_connect_and_speak(self, channel_id: int) -> bool:
        channel = self._get_channel(channel_id)
        if channel is None:
            logger.warning(LogTemplates.VOICE_CHANNEL_NOT_FOUND, channel_id)
            return False

        permissions = channel.permissions_for(channel.guild.me)
        return bool(permissions.connect and permissions.speak)

    def connect(self, channel_id: int) -> DiscordVoiceConnection:
        channel = self._get_channel(channel_id)
        if channel is None:
            raise ConnectionTimeoutError(
                channel_id, 0.0, LogTemplates.VOICE_CHANNEL_NOT_FOUND % channel_id
            )
        return DiscordVoiceConnection(channel)

    def create_player(self) -> DiscordAudioPlayer:
        return DiscordAudioPlayer(volume=self._settings.default_volume)

    def is_bot_alone(self, channel_id: int) -> bool:
        channel = self._get_channel(channel_id)
        if channel is None:
            return False

        me = channel.guild.me
        member_ids = {member.id for member in channel.members}
        return member_ids == {me.id}
