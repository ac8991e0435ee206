"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice adapters)
- Audio (yt-dlp, FFmpeg)
- Web (liveness endpoint)
"""

from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway
from discord_jukebox.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceGateway",
]
