"""
Unit Tests for the HTTP liveness endpoint

Tests for:
- GET and HEAD on / answer 200
- Server start/stop lifecycle and idempotency
- Bind failures are logged, not raised
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from discord_jukebox.config.settings import LivenessSettings
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.infrastructure.web.liveness import LivenessServer, create_app

MODULE = "discord_jukebox.infrastructure.web.liveness"


class TestLivenessApp:
    """Tests for the aiohttp application."""

    @pytest.mark.asyncio
    async def test_get_root(self):
        async with TestClient(TestServer(create_app())) as client:
            response = await client.get("/")

            assert response.status == 200
            assert await response.text() == DiscordUIMessages.LIVENESS_OK
            assert response.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_head_root(self):
        async with TestClient(TestServer(create_app())) as client:
            response = await client.head("/")

            assert response.status == 200

    @pytest.mark.asyncio
    async def test_unknown_path(self):
        async with TestClient(TestServer(create_app())) as client:
            response = await client.get("/metrics")

            assert response.status == 404


class TestLivenessServer:
    """Tests for LivenessServer lifecycle."""

    @pytest.fixture
    def settings(self):
        return LivenessSettings(host="127.0.0.1", port=3999)

    @pytest.mark.asyncio
    async def test_start_and_stop(self, settings):
        runner = MagicMock()
        runner.setup = AsyncMock()
        runner.cleanup = AsyncMock()
        site = MagicMock()
        site.start = AsyncMock()

        with (
            patch(f"{MODULE}.web.AppRunner", return_value=runner),
            patch(f"{MODULE}.web.TCPSite", return_value=site) as mock_site,
        ):
            server = LivenessServer(settings)
            await server.start()

            assert server.is_running
            mock_site.assert_called_once_with(runner, "127.0.0.1", 3999)

            await server.start()
            assert mock_site.call_count == 1

            await server.stop()
            assert not server.is_running
            runner.cleanup.assert_awaited_once()

            await server.stop()
            runner.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bind_failure_is_logged(self, settings, caplog):
        runner = MagicMock()
        runner.setup = AsyncMock()
        runner.cleanup = AsyncMock()
        site = MagicMock()
        site.start = AsyncMock(side_effect=OSError("address in use"))

        with (
            patch(f"{MODULE}.web.AppRunner", return_value=runner),
            patch(f"{MODULE}.web.TCPSite", return_value=site),
        ):
            server = LivenessServer(settings)
            await server.start()

        assert not server.is_running
        runner.cleanup.assert_awaited_once()
        assert "Failed to start liveness server" in caplog.text
