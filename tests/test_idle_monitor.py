"""
Unit Tests for IdleChannelMonitor

Tests for:
- Teardown after the bot is left alone for the grace period
- Joins during the window cancel the teardown
- Leaving again restarts the window
- Channels without a session are ignored
- A session opened into an empty channel is still watched
- Shutdown cancels pending checks
"""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from discord_jukebox.application.services.idle_monitor import IdleChannelMonitor
from discord_jukebox.application.services.playback_controller import PlaybackController
from discord_jukebox.domain.music.entities import Session
from discord_jukebox.domain.music.value_objects import SessionEndReason

CHANNEL_ID = 333333333
GRACE = 0.1


async def register(registry, channel_id: int = CHANNEL_ID) -> Session:
    async def factory() -> Session:
        return Session(channel_id=channel_id)

    return await registry.get_or_create(channel_id, factory)


@pytest.fixture
def teardown():
    return AsyncMock(return_value=True)


@pytest.fixture
def monitor(registry, gateway, teardown):
    return IdleChannelMonitor(
        registry=registry,
        voice_gateway=gateway,
        teardown=teardown,
        grace_seconds=GRACE,
    )


class TestIdleTeardown:
    """Unit tests for the idle grace window."""

    @pytest.mark.asyncio
    async def test_alone_for_grace_period_tears_down(self, monitor, registry, gateway, teardown):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)

        monitor.on_occupancy_changed(CHANNEL_ID)
        assert monitor.is_tracking(CHANNEL_ID)

        await asyncio.sleep(GRACE * 2)

        teardown.assert_awaited_once_with(CHANNEL_ID, SessionEndReason.IDLE_TIMEOUT)
        assert not monitor.is_tracking(CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_join_within_window_prevents_teardown(
        self, monitor, registry, gateway, teardown
    ):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        await asyncio.sleep(GRACE / 2)
        gateway.alone.discard(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        await asyncio.sleep(GRACE)

        teardown.assert_not_awaited()
        assert not monitor.is_tracking(CHANNEL_ID)

    @pytest.mark.asyncio
    async def test_leaving_again_restarts_window(self, monitor, registry, gateway, teardown):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        await asyncio.sleep(GRACE * 0.4)
        gateway.alone.discard(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        await asyncio.sleep(GRACE * 0.2)
        gateway.alone.add(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        # First check fires here and finds a newer stretch on record.
        await asyncio.sleep(GRACE * 0.6)
        teardown.assert_not_awaited()

        await asyncio.sleep(GRACE)
        teardown.assert_awaited_once_with(CHANNEL_ID, SessionEndReason.IDLE_TIMEOUT)

    @pytest.mark.asyncio
    async def test_repeated_events_schedule_one_check(self, monitor, registry, gateway, teardown):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)

        monitor.on_occupancy_changed(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        assert monitor.pending_checks == 1
        await asyncio.sleep(GRACE * 2)
        teardown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejoin_between_check_and_expiry_is_reverified(
        self, monitor, registry, gateway, teardown
    ):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)

        # Occupancy changes without an event reaching the monitor.
        gateway.alone.discard(CHANNEL_ID)
        await asyncio.sleep(GRACE * 2)

        teardown.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_channel_without_session_is_ignored(self, monitor, gateway, teardown):
        gateway.alone.add(CHANNEL_ID)

        monitor.on_occupancy_changed(CHANNEL_ID)

        assert not monitor.is_tracking(CHANNEL_ID)
        assert monitor.pending_checks == 0

    @pytest.mark.asyncio
    async def test_not_alone_is_not_tracked(self, monitor, registry, teardown):
        await register(registry)

        monitor.on_occupancy_changed(CHANNEL_ID)

        assert monitor.pending_checks == 0

    @pytest.mark.asyncio
    async def test_teardown_failure_is_logged(self, monitor, registry, gateway, teardown, caplog):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)
        teardown.side_effect = RuntimeError("gateway closed")

        with caplog.at_level(logging.ERROR):
            monitor.on_occupancy_changed(CHANNEL_ID)
            await asyncio.sleep(GRACE * 2)

        assert "Idle teardown failed" in caplog.text


class TestIdleMonitorShutdown:
    """Unit tests for shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_cancels_pending_checks(self, monitor, registry, gateway, teardown):
        await register(registry)
        gateway.alone.add(CHANNEL_ID)
        monitor.on_occupancy_changed(CHANNEL_ID)
        assert monitor.pending_checks == 1

        await monitor.shutdown()
        await asyncio.sleep(GRACE * 1.5)

        assert monitor.pending_checks == 0
        assert not monitor.is_tracking(CHANNEL_ID)
        teardown.assert_not_awaited()


class TestSessionOpenedIntoEmptyChannel:
    """The bot's own arrival is evaluated once its session is registered."""

    def _wire(self, registry, gateway, resolver, transport):
        monitor: IdleChannelMonitor | None = None

        def session_opened(channel_id: int) -> None:
            monitor.on_occupancy_changed(channel_id)

        controller = PlaybackController(
            registry=registry,
            voice_gateway=gateway,
            media_resolver=resolver,
            audio_transport=transport,
            on_session_opened=session_opened,
        )
        monitor = IdleChannelMonitor(
            registry=registry,
            voice_gateway=gateway,
            teardown=controller.teardown,
            grace_seconds=GRACE,
        )
        return controller, monitor

    @pytest.mark.asyncio
    async def test_requester_left_during_connect(self, registry, gateway, resolver, transport):
        controller, monitor = self._wire(registry, gateway, resolver, transport)
        gateway.alone.add(CHANNEL_ID)
        # The join event for the bot arrives before the session exists.
        monitor.on_occupancy_changed(CHANNEL_ID)
        assert not monitor.is_tracking(CHANNEL_ID)

        await controller.handle_play(CHANNEL_ID, "Song A")
        assert monitor.is_tracking(CHANNEL_ID)

        await asyncio.sleep(GRACE * 2)

        assert CHANNEL_ID not in registry
        assert gateway.connections[0].destroy_calls == 1

    @pytest.mark.asyncio
    async def test_requester_present_keeps_session(self, registry, gateway, resolver, transport):
        controller, monitor = self._wire(registry, gateway, resolver, transport)

        await controller.handle_play(CHANNEL_ID, "Song A")
        await asyncio.sleep(GRACE * 2)

        assert not monitor.is_tracking(CHANNEL_ID)
        assert CHANNEL_ID in registry
