#!/usr/bin/env python3
"""Entry point: configure logging from settings, then run the jukebox bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.utils.logging import ColoredFormatter, ColorMode, apply_color_mode

if TYPE_CHECKING:
    from discord_jukebox.config.settings import Settings

FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FALLBACK_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def load_logging_config(path: Path) -> dict[str, Any] | None:
    """Read a ``dictConfig`` file, or None when it is missing or not JSON."""
    try:
        with open(path) as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None


def _console_fallback(level: int) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter(FALLBACK_FORMAT, FALLBACK_DATEFMT))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def setup_logging(
    log_level: str = "INFO",
    *,
    config_path: Path,
    color: ColorMode = "auto",
) -> None:
    """Apply *config_path* if it loads, else a single coloured console handler.

    *log_level* always wins over the root level in the file, and *color* is
    pushed onto every coloured formatter on the root logger.
    """
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    config = load_logging_config(config_path)
    if config is not None:
        try:
            logging.config.dictConfig(config)
        except ValueError:
            config = None

    if config is None:
        _console_fallback(resolved_level)
        logger.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path)

    logging.getLogger().setLevel(resolved_level)
    apply_color_mode(color)


def _log_liveness(settings: Settings) -> None:
    if settings.liveness.enabled:
        logger.info(LogTemplates.LIVENESS_CONFIGURED, settings.liveness.host, settings.liveness.port)
    else:
        logger.info(LogTemplates.LIVENESS_DISABLED)


def main() -> int:
    from discord_jukebox.config.settings import get_settings

    settings = get_settings()
    setup_logging(
        settings.log_level,
        config_path=settings.log_config_path,
        color=settings.log_color,
    )

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING, settings.environment)
    _log_liveness(settings)

    from discord_jukebox.config.container import create_container
    from discord_jukebox.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)

    try:
        bot.run_with_graceful_shutdown(token_value)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1

    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """Console script entry point (``discord-jukebox``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
