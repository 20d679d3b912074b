"""YouTube metadata and stream capabilities backed by yt-dlp."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yt_dlp
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from media_resolver_api.config import settings
from media_resolver_api.errors import (
    InvalidUrlError,
    MediaResolverError,
    ResourceUnavailableError,
    UpstreamTransientError,
)
from media_resolver_api.services.format_catalog import RawStreamDescriptor, VideoInfo
from media_resolver_api.utils import to_int

logger = logging.getLogger(__name__)

# Default client first; mweb avoids SABR streaming and PO token requirements
# when the default client is refused.
PLAYER_CLIENT_FALLBACKS: List[Optional[List[str]]] = [None, ["mweb"]]

_INVALID_URL_MARKERS = ("unsupported url", "is not a valid url", "incomplete youtube id")
_UNAVAILABLE_MARKERS = (
    "video unavailable",
    "private video",
    "has been removed",
    "does not exist",
    "not available",
    "members-only",
    "sign in to confirm your age",
)


@dataclass
class StreamSource:
    """Direct upstream location of one selected stream."""
    url: str
    selector: int
    headers: Dict[str, str] = field(default_factory=dict)
    container: Optional[str] = None
    content_length: Optional[int] = None


class ExtractionTimeoutError(UpstreamTransientError):
    """yt-dlp did not finish in time. Its worker thread cannot be cancelled."""


def classify_ytdlp_error(error: Exception) -> MediaResolverError:
    """Map a yt-dlp failure onto the resolver's error taxonomy."""
    text = str(error).lower()
    if any(marker in text for marker in _INVALID_URL_MARKERS):
        return InvalidUrlError("Please enter a valid YouTube URL")
    if any(marker in text for marker in _UNAVAILABLE_MARKERS):
        return ResourceUnavailableError("This video is unavailable.")
    return UpstreamTransientError("Failed to fetch video info")


def _has_codec(codec: Any) -> bool:
    return codec not in (None, "none")


def _quality_label(fmt: Dict[str, Any], has_video: bool) -> Optional[str]:
    if not has_video:
        return None
    height = to_int(fmt.get("height"))
    if height:
        fps = to_int(fmt.get("fps"))
        return f"{height}p{fps}" if fps and fps > 30 else f"{height}p"
    return fmt.get("format_note") or None


def descriptor_from_ytdlp(fmt: Dict[str, Any]) -> Optional[RawStreamDescriptor]:
    """Convert one yt-dlp format dict. Returns None for non-numeric format ids."""
    selector = to_int(fmt.get("format_id"))
    if selector is None:
        return None

    has_video = _has_codec(fmt.get("vcodec"))
    has_audio = _has_codec(fmt.get("acodec"))
    tbr = fmt.get("tbr")
    abr = fmt.get("abr")

    return RawStreamDescriptor(
        selector=selector,
        container=fmt.get("ext"),
        quality_label=_quality_label(fmt, has_video),
        has_video=has_video,
        has_audio=has_audio,
        bitrate=int(tbr * 1000) if tbr else None,
        audio_bitrate=int(round(abr)) if abr else None,
        content_length=to_int(fmt.get("filesize")),
        fps=to_int(fmt.get("fps")),
        url=fmt.get("url"),
    )


def video_info_from_ytdlp(info: Dict[str, Any]) -> VideoInfo:
    thumbnails = [t["url"] for t in info.get("thumbnails") or [] if t.get("url")]
    if not thumbnails and info.get("thumbnail"):
        thumbnails = [info["thumbnail"]]

    raw_formats: List[RawStreamDescriptor] = []
    for fmt in info.get("formats") or []:
        descriptor = descriptor_from_ytdlp(fmt)
        if descriptor is None:
            logger.debug(f"Skipping format with non-numeric id: {fmt.get('format_id')}")
            continue
        raw_formats.append(descriptor)

    return VideoInfo(
        title=info.get("title") or "",
        thumbnails=thumbnails,
        duration_seconds=to_int(info.get("duration")),
        raw_formats=raw_formats,
    )


class YouTubeService:
    """Opaque capability over yt-dlp: metadata lookup and stream location."""

    RETRY_WAIT_SECS = 0.5

    @staticmethod
    def _extract_info(url: str, player_clients: Optional[List[str]] = None) -> Dict[str, Any]:
        """Blocking yt-dlp extraction. Runs in a worker thread."""
        ydl_opts: Dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "noplaylist": True,
            "ignore_no_formats_error": True,
            "socket_timeout": settings.UPSTREAM_TIMEOUT_SECS,
        }
        if player_clients:
            ydl_opts["extractor_args"] = {"youtube": {"player_client": player_clients}}

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
                if not info:
                    raise UpstreamTransientError("Failed to fetch video info")
                return ydl.sanitize_info(info)
        except yt_dlp.utils.DownloadError as e:
            raise classify_ytdlp_error(e) from e

    @classmethod
    async def _extract_with_retry(cls, url: str) -> Dict[str, Any]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(len(PLAYER_CLIENT_FALLBACKS)),
            wait=wait_fixed(cls.RETRY_WAIT_SECS),
            # A timed-out worker keeps running, so a timeout is never retried.
            retry=(
                retry_if_exception_type(UpstreamTransientError)
                & retry_if_not_exception_type(ExtractionTimeoutError)
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                clients = PLAYER_CLIENT_FALLBACKS[attempt.retry_state.attempt_number - 1]
                try:
                    return await asyncio.wait_for(
                        asyncio.to_thread(cls._extract_info, url, clients),
                        timeout=settings.METADATA_TIMEOUT_SECS,
                    )
                except asyncio.TimeoutError as e:
                    logger.warning(
                        f"yt-dlp extraction exceeded {settings.METADATA_TIMEOUT_SECS}s; "
                        "its worker thread is left to finish on its own"
                    )
                    raise ExtractionTimeoutError(
                        "Video metadata extraction timed out"
                    ) from e
        raise UpstreamTransientError("Failed to fetch video info")

    @classmethod
    async def get_info(cls, url: str) -> VideoInfo:
        """
        Fetch title, thumbnails, duration and every stream descriptor.

        Raises:
            InvalidUrlError: yt-dlp does not recognise the URL
            ResourceUnavailableError: the video is private, removed, or restricted
            UpstreamTransientError: network failure or timeout after retries
        """
        info = await cls._extract_with_retry(url)
        video_info = video_info_from_ytdlp(info)
        logger.info(
            f"yt-dlp returned {len(video_info.raw_formats)} formats for '{video_info.title[:60]}'"
        )
        return video_info

    @classmethod
    async def resolve_stream(cls, url: str, selector: int) -> StreamSource:
        """
        Re-resolve one stream by selector into a directly fetchable location.

        Raises:
            ResourceUnavailableError: the selector is not offered for this video
        """
        info = await cls._extract_with_retry(url)
        for fmt in info.get("formats") or []:
            if to_int(fmt.get("format_id")) == selector and fmt.get("url"):
                return StreamSource(
                    url=fmt["url"],
                    selector=selector,
                    headers=dict(fmt.get("http_headers") or {}),
                    container=fmt.get("ext"),
                    content_length=to_int(fmt.get("filesize")),
                )
        raise ResourceUnavailableError(
            f"Format {selector} is not available for this video.", code="format_unavailable"
        )
