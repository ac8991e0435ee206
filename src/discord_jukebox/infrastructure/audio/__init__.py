"""Audio infrastructure - yt-dlp resolver and FFmpeg transport."""

from discord_jukebox.infrastructure.audio.ffmpeg_transport import FFmpegAudioTransport, FFmpegConfig
from discord_jukebox.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpMediaResolver

__all__ = [
    "AudioFormatInfo",
    "FFmpegAudioTransport",
    "FFmpegConfig",
    "YtDlpMediaResolver",
    "YtDlpOpts",
    "YtDlpTrackInfo",
]
