"""MediaResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.audio_resolver import MediaResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import QueueEntry
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final[int] = 500

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"https?://"),
    re.compile(r"www\."),
]


class YtDlpMediaResolver(MediaResolver):
    """Resolve free-text searches and URLs into queue entries.

    The entry's ``source_url`` is the page URL; the short-lived stream URL is
    looked up again when the entry is actually played.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format or "bestaudio/best",
            socket_timeout=self._settings.socket_timeout,
        )

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _info_to_entry(self, info: YtDlpTrackInfo) -> QueueEntry | None:
        url = info.webpage_url or info.url
        if not url:
            logger.warning(LogTemplates.YTDLP_NO_URL_IN_INFO_DICT)
            return None

        return QueueEntry(
            source_url=url,
            title=info.title[:MAX_TITLE_LENGTH],
            duration_seconds=0 if info.is_live else info.duration,
        )

    @staticmethod
    def _extract_stream_url(info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return YtDlpMediaResolver._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
                return self._parse_info(dict(data)) if isinstance(data, dict) else None
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

    def _search_sync(self, query: str) -> YtDlpTrackInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(f"ytsearch1:{query}", download=False)

                if not isinstance(data, dict):
                    return None

                entries = data.get("entries") or []
                for entry in entries:
                    if entry:
                        return self._parse_info(dict(entry))
                return None
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return None

    async def resolve(self, query: str) -> QueueEntry | None:
        query = query.strip()
        if not query:
            return None

        if self.is_url(query):
            info = await asyncio.to_thread(self._extract_info_sync, query)
        else:
            info = await asyncio.to_thread(self._search_sync, query)

        if info is None:
            return None

        entry = self._info_to_entry(info)
        if entry is not None:
            logger.info(LogTemplates.YTDLP_RESOLVED, query, entry.title)
        return entry

    async def stream_url_for(self, source_url: str) -> str | None:
        """Look up a fresh direct media URL for a page URL."""
        info = await asyncio.to_thread(self._extract_info_sync, source_url)
        if info is None:
            return None

        stream_url = self._extract_stream_url(info)
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, source_url)
        return stream_url

    def is_url(self, query: str) -> bool:
        return any(pattern.search(query) for pattern in URL_PATTERNS)
