"""Discord jukebox: per-voice-channel music playback sessions."""

__version__ = "0.1.0"
