"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_jukebox.application.interfaces.audio_resolver import AudioTransport, MediaResolver
from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    StreamEndCallback,
    VoiceConnection,
    VoiceGateway,
)

__all__ = [
    "MediaResolver",
    "AudioTransport",
    "VoiceGateway",
    "VoiceConnection",
    "AudioPlayer",
    "StreamEndCallback",
]
