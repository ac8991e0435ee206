"""Slash-command cog for the jukebox: play, skip, stop, queue, pause, resume, help."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages

if TYPE_CHECKING:
    from ....application.services.playback_controller import PlaybackController
    from ....application.services.replies import CommandReply
    from ....config.container import Container

logger = logging.getLogger(__name__)


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def send_reply(interaction: discord.Interaction, reply: CommandReply) -> None:
    if interaction.response.is_done():
        await interaction.followup.send(reply.message, ephemeral=reply.ephemeral)
    else:
        await interaction.response.send_message(reply.message, ephemeral=reply.ephemeral)


def voice_channel_id(interaction: discord.Interaction) -> int | None:
    """The invoker's current voice channel, which is the session key for every command."""
    user = interaction.user
    if not isinstance(user, discord.Member):
        return None
    if user.voice is None or user.voice.channel is None:
        return None
    return user.voice.channel.id


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def controller(self) -> PlaybackController:
        return self.container.playback_controller

    async def _guild_only(self, interaction: discord.Interaction) -> bool:
        if interaction.guild is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return False
        return True

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        if not await self._guild_only(interaction):
            return

        channel_id = voice_channel_id(interaction)
        if channel_id is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
            return

        # Interactions must be acknowledged within 3 seconds.
        await interaction.response.defer(thinking=True)

        requested_by = getattr(interaction.user, "display_name", None)
        reply = await self.controller.handle_play(
            channel_id, query, requested_by=requested_by
        )
        await send_reply(interaction, reply)

    # ─────────────────────────────────────────────────────────────────
    # Transport controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current song.")
    async def skip(self, interaction: discord.Interaction) -> None:
        if not await self._guild_only(interaction):
            return
        reply = await self.controller.handle_skip(voice_channel_id(interaction))
        await send_reply(interaction, reply)

    @app_commands.command(name="stop", description="Stop the music and disconnect the bot.")
    async def stop(self, interaction: discord.Interaction) -> None:
        if not await self._guild_only(interaction):
            return
        reply = await self.controller.handle_stop(voice_channel_id(interaction))
        await send_reply(interaction, reply)

    @app_commands.command(name="pause", description="Pause the music.")
    async def pause(self, interaction: discord.Interaction) -> None:
        if not await self._guild_only(interaction):
            return
        reply = await self.controller.handle_pause(voice_channel_id(interaction))
        await send_reply(interaction, reply)

    @app_commands.command(name="resume", description="Resume the music.")
    async def resume(self, interaction: discord.Interaction) -> None:
        if not await self._guild_only(interaction):
            return
        reply = await self.controller.handle_resume(voice_channel_id(interaction))
        await send_reply(interaction, reply)

    # ─────────────────────────────────────────────────────────────────
    # Info
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the playback queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        if not await self._guild_only(interaction):
            return
        reply = await self.controller.handle_queue_view(voice_channel_id(interaction))
        await send_reply(interaction, reply)

    @app_commands.command(name="help", description="Show the available commands.")
    async def help(self, interaction: discord.Interaction) -> None:
        reply = await self.controller.handle_help()
        await send_reply(interaction, reply)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
