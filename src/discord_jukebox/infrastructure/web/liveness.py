"""HTTP liveness endpoint for hosting platforms that ping the process."""

from __future__ import annotations

import logging

from aiohttp import web

from discord_jukebox.config.settings import LivenessSettings
from discord_jukebox.domain.shared.messages import DiscordUIMessages, LogTemplates

logger = logging.getLogger(__name__)


async def handle_root(request: web.Request) -> web.Response:
    return web.Response(text=DiscordUIMessages.LIVENESS_OK, content_type="text/plain")


def create_app() -> web.Application:
    """Build the liveness app. ``GET /`` also answers ``HEAD /``."""
    app = web.Application()
    app.router.add_get("/", handle_root)
    return app


class LivenessServer:
    """Runs the liveness app on the bot's event loop."""

    def __init__(self, settings: LivenessSettings | None = None) -> None:
        self._settings = settings or LivenessSettings()
        self._runner: web.AppRunner | None = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return

        runner = web.AppRunner(create_app())
        await runner.setup()
        site = web.TCPSite(runner, self._settings.host, self._settings.port)
        try:
            await site.start()
        except OSError as exc:
            logger.error(LogTemplates.LIVENESS_START_FAILED, exc)
            await runner.cleanup()
            return

        self._runner = runner
        logger.info(LogTemplates.LIVENESS_STARTED, self._settings.host, self._settings.port)

    async def stop(self) -> None:
        if self._runner is None:
            return

        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info(LogTemplates.LIVENESS_STOPPED)
