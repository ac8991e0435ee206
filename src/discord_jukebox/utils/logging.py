"""Console log formatting with a configurable colour mode."""

from __future__ import annotations

import logging
import os
import sys
from typing import Literal, TextIO

ColorMode = Literal["auto", "always", "never"]

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET = "\033[0m"


def color_enabled(mode: ColorMode, stream: TextIO | None = None) -> bool:
    """Resolve *mode* for *stream*.

    ``auto`` colours only a TTY and backs off when ``NO_COLOR`` is set;
    ``always`` and ``never`` ignore both.
    """
    if mode == "never":
        return False
    if mode == "always":
        return True
    if os.environ.get("NO_COLOR") is not None:
        return False
    isatty = getattr(stream or sys.stdout, "isatty", None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in its ANSI colour."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
        *,
        color: ColorMode = "auto",
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(fmt, datefmt, style)
        self.color = color
        self.stream = stream

    def format(self, record: logging.LogRecord) -> str:
        if color_enabled(self.color, self.stream):
            record = logging.makeLogRecord(record.__dict__)
            color = LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{RESET}"
        return super().format(record)


def apply_color_mode(mode: ColorMode, logger: logging.Logger | None = None) -> int:
    """Set *mode* on the coloured formatters of *logger*'s handlers (root by default).

    Handlers that write to a stream also pass it to their formatter, so ``auto``
    checks the stream the record actually goes to. Returns the number updated.
    """
    target = logger or logging.getLogger()
    updated = 0
    for handler in target.handlers:
        formatter = handler.formatter
        if not isinstance(formatter, ColoredFormatter):
            continue
        formatter.color = mode
        formatter.stream = getattr(handler, "stream", None)
        updated += 1
    return updated
