"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Entry Errors
    DUPLICATE_ENTRY = "'{title}' is already queued or playing in this session"

    # Settings Validation Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Audio/Stream Errors
    NO_STREAM_URL_FOR_ENTRY = "No stream URL found for {source_url}"

    # Authentication/Startup Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Session Lifecycle
    SESSION_CREATING = "Creating session for channel %s"
    SESSION_CREATED = "Session ready for channel %s"
    SESSION_DISCARDED = "Discarded session attempt for channel %s: %s"
    SESSION_TORN_DOWN = "Session for channel %s torn down (%s), %d queued entries dropped"
    SESSION_ALREADY_CLOSING = "Session for channel %s is already closing"
    SESSION_PLAYER_STOP_FAILED = "Failed to stop player for channel %s: %r"
    SESSION_DESTROY_FAILED = "Failed to destroy connection for channel %s: %r"
    SESSION_SHUTDOWN = "Tearing down %d session(s) on shutdown"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting to channel %s: %r"
    VOICE_CHANNEL_NOT_FOUND = "Voice channel %s not found"
    VOICE_CONNECTION_LOST = "Voice connection lost for channel %s"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in channel %s: %r"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in channel %s"
    PLAYBACK_QUEUED = "Queued '%s' at position %d in channel %s"
    PLAYBACK_PAUSED = "Paused playback in channel %s"
    PLAYBACK_RESUMED = "Resumed playback in channel %s"
    PLAYBACK_SKIPPED = "Skip requested for '%s' in channel %s"
    PLAYBACK_STREAM_FAILED = "Stream failed for '%s' in channel %s: %s"
    PLAYBACK_PLAYER_ERROR = "Player error in channel %s: %r"
    PLAYBACK_ADVANCED = "Advancing to '%s' in channel %s"
    PLAYBACK_QUEUE_EXHAUSTED = "Queue exhausted in channel %s, going idle"
    PLAYBACK_STALE_EVENT = "Ignoring stale stream event for channel %s (generation %d)"
    PLAYBACK_SESSION_GONE = "Session for channel %s went away while starting '%s'"
    PLAYBACK_SKIPPED_WHILE_OPENING = "Dropped '%s' in channel %s, skipped before its stream opened"
    PLAYBACK_TRACK_ENDED = "Stream ended in channel %s (error=%r)"
    PLAYBACK_CALLBACK_ERROR = "Error in stream end callback for channel %s: %r"

    # Idle Monitor
    IDLE_CHECK_SCHEDULED = "Bot alone in channel %s, checking again in %ss"
    IDLE_CHECK_SKIPPED = "Idle check for channel %s skipped, channel no longer solitary"
    IDLE_TEARDOWN = "Bot alone in channel %s for %ss, disconnecting"
    IDLE_TEARDOWN_FAILED = "Idle teardown failed for channel %s"

    # yt-dlp
    YTDLP_NO_URL_IN_INFO_DICT = "No URL found in info dict"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %s"
    YTDLP_FAILED_SEARCH = "Search failed for '%s'"
    YTDLP_FAILED_RESOLVE = "Failed to resolve '%s'"
    YTDLP_RESOLVED = "Resolved '%s' to '%s'"

    # Liveness Server
    LIVENESS_STARTED = "Liveness server listening on http://%s:%s"
    LIVENESS_STOPPED = "Liveness server stopped"
    LIVENESS_START_FAILED = "Failed to start liveness server: %r"
    LIVENESS_CONFIGURED = "Liveness endpoint enabled on %s:%s"
    LIVENESS_DISABLED = "Liveness endpoint disabled"

    # Logging
    LOGGING_CONFIG_FALLBACK = "Could not load logging config %s, using console defaults"

    # Bot Lifecycle
    BOT_STARTING = "Starting jukebox bot (environment: %s)"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Running setup hook"
    BOT_SETUP_COMPLETE = "Setup complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guild(s)"
    BOT_COG_LOADED = "Loaded cog %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_SYNCED_GUILD = "Synced %d command(s) to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync commands to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %d global command(s)"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync global commands: %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command '%s' failed: %r"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Could not send error message to user"
    BOT_SHUTTING_DOWN = "Shutting down..."
    BOT_SHUTDOWN_TIMEOUT = "Shutdown did not finish within %ss"
    BOT_SHUTDOWN_COMPLETE = "Shutdown complete"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord interactions.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Playback
    NOW_PLAYING = "▶️ Now playing: **{title}**"
    QUEUED = "➕ Queued **{title}** at position {position}"
    SKIPPED = "⏭️ Skipped **{title}**"
    SKIPPED_QUEUE_EMPTY = "⏭️ Skipped **{title}**, no more songs in the queue"
    STOPPED = "⏹️ Music stopped and bot disconnected"
    PAUSED = "⏸️ Music paused"
    RESUMED = "▶️ Music resumed"

    # Informational state replies
    STATE_ALREADY_PAUSED = "The music is already paused"
    STATE_NOT_PAUSED = "The music is not paused"
    STATE_NOTHING_TO_SKIP = "There is nothing playing to skip"
    STATE_NOTHING_PLAYING = "Nothing is playing right now"
    STATE_NO_ACTIVE_SESSION = "No music is playing in your voice channel"
    STATE_QUEUE_EMPTY = "The queue is empty"
    STATE_SESSION_CLOSING = "The player is disconnecting, try again in a moment"
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel"
    STATE_SERVER_ONLY = "This command only works in a server"

    # Errors
    ERROR_PERMISSION_DENIED = "I don't have permission to connect or speak in that channel"
    ERROR_COULD_NOT_JOIN_VOICE = "I couldn't connect to your voice channel"
    ERROR_TRACK_NOT_FOUND = "Couldn't find anything playable for: {query}"
    ERROR_PLAYBACK_FAILED = "Couldn't stream **{title}**, skipping it"
    ERROR_OCCURRED = "❌ An error occurred: {error}"

    # Queue view
    QUEUE_HEADER = "🎵 **Queue**"
    QUEUE_NOW_PLAYING = "▶️ **Now playing:** {title} [{duration}]"
    QUEUE_UP_NEXT = "**Up next:**"
    QUEUE_LINE = "{position}. {title} [{duration}]"
    QUEUE_MORE = "…and {count} more"

    # Help
    HELP_TEXT = (
        "🎵 **Music bot commands:**\n"
        "\n"
        "`/play <song>` - Play a song from a YouTube URL or search\n"
        "`/skip` - Skip the current song\n"
        "`/stop` - Stop the music and disconnect the bot\n"
        "`/queue` - Show the playback queue\n"
        "`/pause` - Pause the music\n"
        "`/resume` - Resume the music\n"
        "`/help` - Show this message"
    )

    # Liveness
    LIVENESS_OK = "Music bot is running"
