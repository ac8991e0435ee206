"""Disconnect from voice channels the bot has been left alone in."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ...domain.music.value_objects import SessionEndReason
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.registry import SessionRegistry
    from ..interfaces.voice_adapter import VoiceGateway

logger = logging.getLogger(__name__)

TeardownFn = Callable[[DiscordSnowflake, SessionEndReason], Awaitable[bool]]


class IdleChannelMonitor:
    """Fire-and-reverify idle teardown.

    When an occupancy change leaves the bot alone, that solitary stretch is
    recorded and a check is scheduled ``grace_seconds`` later. A join clears
    the stretch instead of cancelling the timer, so the check only tears the
    session down if its stretch is still the one on record and the bot is
    still alone.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        voice_gateway: VoiceGateway,
        teardown: TeardownFn,
        grace_seconds: float = 5.0,
    ) -> None:
        self._registry = registry
        self._voice_gateway = voice_gateway
        self._teardown = teardown
        self._grace_seconds = grace_seconds
        self._solitary: dict[DiscordSnowflake, int] = {}
        self._stretch_ids = itertools.count(1)
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending_checks(self) -> int:
        return len(self._tasks)

    def is_tracking(self, channel_id: DiscordSnowflake) -> bool:
        return channel_id in self._solitary

    def on_occupancy_changed(self, channel_id: DiscordSnowflake) -> None:
        """Record a membership change in *channel_id*."""
        if channel_id not in self._registry:
            self._solitary.pop(channel_id, None)
            return

        if not self._voice_gateway.is_bot_alone(channel_id):
            self._solitary.pop(channel_id, None)
            return

        if channel_id in self._solitary:
            return

        stretch = next(self._stretch_ids)
        self._solitary[channel_id] = stretch
        logger.info(LogTemplates.IDLE_CHECK_SCHEDULED, channel_id, self._grace_seconds)

        task = asyncio.create_task(self._deferred_check(channel_id, stretch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deferred_check(self, channel_id: DiscordSnowflake, stretch: int) -> None:
        await asyncio.sleep(self._grace_seconds)

        if self._solitary.get(channel_id) != stretch:
            logger.debug(LogTemplates.IDLE_CHECK_SKIPPED, channel_id)
            return

        if not self._voice_gateway.is_bot_alone(channel_id):
            self._solitary.pop(channel_id, None)
            logger.debug(LogTemplates.IDLE_CHECK_SKIPPED, channel_id)
            return

        del self._solitary[channel_id]
        logger.info(LogTemplates.IDLE_TEARDOWN, channel_id, self._grace_seconds)
        try:
            await self._teardown(channel_id, SessionEndReason.IDLE_TIMEOUT)
        except Exception:
            logger.exception(LogTemplates.IDLE_TEARDOWN_FAILED, channel_id)

    async def shutdown(self) -> None:
        """Cancel outstanding checks."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._solitary.clear()
