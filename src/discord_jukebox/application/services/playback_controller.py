"""Playback Controller - turns user commands into session transitions.

Every command resolves to at most one transition on one channel's session
and yields a :class:`CommandReply`. End-of-stream and player errors come
back through :meth:`PlaybackController.on_stream_end`, which is the only
place a session advances to its next entry.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.entities import QueueEntry, Session
from ...domain.music.value_objects import SessionEndReason
from ...domain.shared.exceptions import (
    ConnectionTimeoutError,
    ResolutionFailureError,
    StreamFailureError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ...utils.reply import format_duration, truncate
from .replies import CommandReply, ReplyStatus

if TYPE_CHECKING:
    from ...domain.music.registry import SessionRegistry
    from ..interfaces.audio_resolver import AudioTransport, MediaResolver
    from ..interfaces.voice_adapter import VoiceGateway

logger = logging.getLogger(__name__)

SessionOpenedHook = Callable[[DiscordSnowflake], None]


class PlaybackController:
    """Orchestrates playback sessions across the registry, voice gateway and audio ports."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        voice_gateway: VoiceGateway,
        media_resolver: MediaResolver,
        audio_transport: AudioTransport,
        connect_timeout: float = 5.0,
        queue_view_limit: int = 10,
        on_session_opened: SessionOpenedHook | None = None,
    ) -> None:
        self._registry = registry
        self._voice_gateway = voice_gateway
        self._resolver = media_resolver
        self._transport = audio_transport
        self._connect_timeout = connect_timeout
        self._queue_view_limit = queue_view_limit
        self._on_session_opened = on_session_opened

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # ── Commands ────────────────────────────────────────────────────

    async def handle_play(
        self,
        voice_channel_id: DiscordSnowflake | None,
        query: str,
        *,
        requested_by: str | None = None,
    ) -> CommandReply:
        """Resolve *query* and either start it or append it to the channel's queue."""
        if voice_channel_id is None:
            return CommandReply.info(
                ReplyStatus.NOT_IN_VOICE_CHANNEL, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE
            )

        if not self._voice_gateway.can_connect_and_speak(voice_channel_id):
            logger.warning(LogTemplates.VOICE_NO_PERMISSION, voice_channel_id)
            return CommandReply.info(
                ReplyStatus.PERMISSION_DENIED, DiscordUIMessages.ERROR_PERMISSION_DENIED
            )

        try:
            entry = await self._resolve(query)
        except ResolutionFailureError:
            return CommandReply.info(
                ReplyStatus.TRACK_NOT_FOUND,
                DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=truncate(query)),
            )

        if requested_by:
            entry = entry.with_requester(requested_by)

        opening = voice_channel_id not in self._registry
        try:
            session = await self._registry.get_or_create(
                voice_channel_id, lambda: self._open_session(voice_channel_id)
            )
        except ConnectionTimeoutError:
            return CommandReply.info(
                ReplyStatus.CONNECTION_FAILED, DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
            )

        # Everyone may have left while the bot was connecting.
        if opening and self._on_session_opened is not None:
            self._on_session_opened(voice_channel_id)

        if session.is_closed:
            return CommandReply.info(
                ReplyStatus.SESSION_CLOSING, DiscordUIMessages.STATE_SESSION_CLOSING
            )

        if session.is_idle:
            if await self._dispatch(session, entry):
                return CommandReply.now_playing(entry)

            if session.is_closed:
                return CommandReply.info(
                    ReplyStatus.SESSION_CLOSING, DiscordUIMessages.STATE_SESSION_CLOSING
                )

            skipped = session.is_skipped(session.generation)
            await self._advance(session)
            if skipped:
                return CommandReply.skipped(entry, session.current is None)
            return CommandReply.info(
                ReplyStatus.PLAYBACK_FAILED,
                DiscordUIMessages.ERROR_PLAYBACK_FAILED.format(title=entry.title),
            )

        position = session.enqueue(entry)
        logger.info(LogTemplates.PLAYBACK_QUEUED, entry.title, position, voice_channel_id)
        return CommandReply.queued(entry, position)

    async def handle_skip(self, voice_channel_id: DiscordSnowflake | None) -> CommandReply:
        """Stop the current entry and let its end-of-stream event advance the queue."""
        if voice_channel_id is None:
            return CommandReply.info(
                ReplyStatus.NOT_IN_VOICE_CHANNEL, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE
            )

        session = self._live_session(voice_channel_id)
        if session is None:
            return CommandReply.info(
                ReplyStatus.NO_ACTIVE_SESSION, DiscordUIMessages.STATE_NO_ACTIVE_SESSION
            )

        skipped = session.current
        if skipped is None or not session.state.is_active:
            return CommandReply.info(
                ReplyStatus.NOTHING_TO_SKIP, DiscordUIMessages.STATE_NOTHING_TO_SKIP
            )

        queue_empty = session.queue_length == 0
        logger.info(LogTemplates.PLAYBACK_SKIPPED, skipped.title, voice_channel_id)
        if session.is_opening:
            # The player has nothing to stop yet; _dispatch drops the stream once it opens.
            session.skip_opening()
        else:
            await session.player.stop()
        return CommandReply.skipped(skipped, queue_empty)

    async def handle_stop(self, voice_channel_id: DiscordSnowflake | None) -> CommandReply:
        if voice_channel_id is None:
            return CommandReply.info(
                ReplyStatus.NOT_IN_VOICE_CHANNEL, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE
            )

        if await self.teardown(voice_channel_id, SessionEndReason.STOP_COMMAND):
            return CommandReply.simple(ReplyStatus.STOPPED, DiscordUIMessages.STOPPED)

        return CommandReply.info(
            ReplyStatus.NO_ACTIVE_SESSION, DiscordUIMessages.STATE_NO_ACTIVE_SESSION
        )

    async def handle_pause(self, voice_channel_id: DiscordSnowflake | None) -> CommandReply:
        session = self._live_session(voice_channel_id)
        if session is None:
            return CommandReply.info(
                ReplyStatus.NO_ACTIVE_SESSION, DiscordUIMessages.STATE_NO_ACTIVE_SESSION
            )

        if session.is_paused:
            return CommandReply.info(
                ReplyStatus.ALREADY_PAUSED, DiscordUIMessages.STATE_ALREADY_PAUSED
            )

        if not session.is_playing:
            return CommandReply.info(
                ReplyStatus.NOTHING_PLAYING, DiscordUIMessages.STATE_NOTHING_PLAYING
            )

        await session.player.pause()
        session.pause()
        logger.info(LogTemplates.PLAYBACK_PAUSED, voice_channel_id)
        return CommandReply.simple(ReplyStatus.PAUSED, DiscordUIMessages.PAUSED)

    async def handle_resume(self, voice_channel_id: DiscordSnowflake | None) -> CommandReply:
        session = self._live_session(voice_channel_id)
        if session is None:
            return CommandReply.info(
                ReplyStatus.NO_ACTIVE_SESSION, DiscordUIMessages.STATE_NO_ACTIVE_SESSION
            )

        if not session.is_paused:
            return CommandReply.info(ReplyStatus.NOT_PAUSED, DiscordUIMessages.STATE_NOT_PAUSED)

        await session.player.unpause()
        session.resume()
        logger.info(LogTemplates.PLAYBACK_RESUMED, voice_channel_id)
        return CommandReply.simple(ReplyStatus.RESUMED, DiscordUIMessages.RESUMED)

    async def handle_queue_view(self, voice_channel_id: DiscordSnowflake | None) -> CommandReply:
        session = self._live_session(voice_channel_id)
        if session is None or (session.current is None and session.queue_length == 0):
            return CommandReply.info(ReplyStatus.QUEUE_EMPTY, DiscordUIMessages.STATE_QUEUE_EMPTY)

        lines = [DiscordUIMessages.QUEUE_HEADER]
        if session.current is not None:
            lines.append(
                DiscordUIMessages.QUEUE_NOW_PLAYING.format(
                    title=truncate(session.current.title),
                    duration=format_duration(session.current.duration_seconds),
                )
            )

        if session.queue:
            lines.append(DiscordUIMessages.QUEUE_UP_NEXT)
            shown = session.queue[: self._queue_view_limit]
            for position, entry in enumerate(shown, start=1):
                lines.append(
                    DiscordUIMessages.QUEUE_LINE.format(
                        position=position,
                        title=truncate(entry.title),
                        duration=format_duration(entry.duration_seconds),
                    )
                )
            remaining = session.queue_length - len(shown)
            if remaining > 0:
                lines.append(DiscordUIMessages.QUEUE_MORE.format(count=remaining))

        return CommandReply.simple(ReplyStatus.QUEUE_VIEW, "\n".join(lines))

    async def handle_help(self) -> CommandReply:
        return CommandReply.simple(ReplyStatus.HELP, DiscordUIMessages.HELP_TEXT)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def teardown(self, channel_id: DiscordSnowflake, reason: SessionEndReason) -> bool:
        """Destroy the channel's session: clear queue, stop player, destroy connection, unregister.

        Returns:
            True if a live session was torn down, False if there was none.
        """
        session = self._registry.get(channel_id)
        if session is None:
            return False

        if session.is_closed:
            logger.debug(LogTemplates.SESSION_ALREADY_CLOSING, channel_id)
            return False

        dropped = session.close()

        try:
            await session.player.stop()
        except Exception as exc:
            logger.warning(LogTemplates.SESSION_PLAYER_STOP_FAILED, channel_id, exc)

        try:
            await session.connection.destroy()
        except Exception as exc:
            logger.warning(LogTemplates.SESSION_DESTROY_FAILED, channel_id, exc)

        self._registry.remove(channel_id, session)
        logger.info(LogTemplates.SESSION_TORN_DOWN, channel_id, reason.value, dropped)
        return True

    async def handle_connection_lost(self, channel_id: DiscordSnowflake) -> bool:
        """React to the transport reporting a permanent disconnect."""
        if channel_id not in self._registry:
            return False

        logger.warning(LogTemplates.VOICE_CONNECTION_LOST, channel_id)
        return await self.teardown(channel_id, SessionEndReason.CONNECTION_LOST)

    async def shutdown(self) -> None:
        channel_ids = self._registry.channel_ids()
        if channel_ids:
            logger.info(LogTemplates.SESSION_SHUTDOWN, len(channel_ids))
        for channel_id in channel_ids:
            await self.teardown(channel_id, SessionEndReason.SHUTDOWN)

    # ── Player callback ─────────────────────────────────────────────

    async def on_stream_end(
        self, channel_id: DiscordSnowflake, generation: int, error: BaseException | None
    ) -> None:
        """Handle the end of the stream that was started as slot *generation*.

        Natural completion, an explicit stop (skip) and a stream error all land
        here; events for a slot that is no longer current are dropped.
        """
        logger.debug(LogTemplates.PLAYBACK_TRACK_ENDED, channel_id, error)

        session = self._registry.get(channel_id)
        if session is None or not session.is_current_slot(generation):
            logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, channel_id, generation)
            return

        if error is not None:
            logger.error(LogTemplates.PLAYBACK_PLAYER_ERROR, channel_id, error)
            session.mark_recovering()

        await self._advance(session)

    # ── Internals ───────────────────────────────────────────────────

    def _live_session(self, channel_id: DiscordSnowflake | None) -> Session | None:
        if channel_id is None:
            return None
        session = self._registry.get(channel_id)
        if session is None or session.is_closed:
            return None
        return session

    async def _resolve(self, query: str) -> QueueEntry:
        try:
            entry = await self._resolver.resolve(query)
        except Exception as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_RESOLVE, query, exc_info=True)
            raise ResolutionFailureError(query) from exc

        if entry is None:
            logger.info(LogTemplates.YTDLP_FAILED_RESOLVE, query)
            raise ResolutionFailureError(query)
        return entry

    async def _open_session(self, channel_id: DiscordSnowflake) -> Session:
        """Connect to the channel and wait for the link, discarding the attempt on failure."""
        connection = self._voice_gateway.connect(channel_id)
        player = self._voice_gateway.create_player()
        connection.subscribe(player)

        session = Session(channel_id=channel_id)
        session.attach(connection, player)

        try:
            await connection.wait_ready(self._connect_timeout)
        except Exception as exc:
            logger.warning(LogTemplates.SESSION_DISCARDED, channel_id, exc)
            try:
                await connection.destroy()
            except Exception as destroy_exc:
                logger.warning(LogTemplates.SESSION_DESTROY_FAILED, channel_id, destroy_exc)
            session.close()
            if isinstance(exc, ConnectionTimeoutError):
                raise
            raise ConnectionTimeoutError(channel_id, self._connect_timeout) from exc

        session.mark_ready()
        logger.info(LogTemplates.SESSION_CREATED, channel_id)
        return session

    async def _dispatch(self, session: Session, entry: QueueEntry) -> bool:
        """Hand *entry* to the session's player. Returns False if it never started."""
        channel_id = session.channel_id
        generation = session.begin(entry)

        try:
            stream = await self._transport.open_stream(entry.source_url)
        except StreamFailureError as exc:
            logger.warning(LogTemplates.PLAYBACK_STREAM_FAILED, entry.title, channel_id, exc)
            if session.is_current_slot(generation):
                session.mark_recovering()
            return False

        if not session.is_current_slot(generation):
            self._transport.release(stream)
            logger.info(LogTemplates.PLAYBACK_SESSION_GONE, channel_id, entry.title)
            return False

        if session.is_skipped(generation):
            self._transport.release(stream)
            logger.info(LogTemplates.PLAYBACK_SKIPPED_WHILE_OPENING, entry.title, channel_id)
            return False

        on_end = functools.partial(self.on_stream_end, channel_id, generation)
        try:
            await session.player.play(stream, on_end)
        except Exception as exc:
            self._transport.release(stream)
            logger.error(LogTemplates.PLAYBACK_PLAYER_ERROR, channel_id, exc)
            if session.is_current_slot(generation):
                session.mark_recovering()
            return False

        session.mark_streaming(generation)

        # A pause issued while the stream was opening still applies.
        if session.is_paused:
            await session.player.pause()

        logger.info(LogTemplates.PLAYBACK_STARTED, entry.title, channel_id)
        return True

    async def _advance(self, session: Session) -> QueueEntry | None:
        """Dispatch the next playable queued entry, or leave the session idle."""
        while not session.is_closed:
            entry = session.advance()
            if entry is None:
                logger.info(LogTemplates.PLAYBACK_QUEUE_EXHAUSTED, session.channel_id)
                return None

            logger.info(LogTemplates.PLAYBACK_ADVANCED, entry.title, session.channel_id)
            if await self._dispatch(session, entry):
                return entry
        return None
