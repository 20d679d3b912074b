"""
Format catalog builder for YouTube videos.

Turns the raw, heterogeneous stream list reported by the metadata capability
into two ranked, de-duplicated catalogs:
  - video catalog: every stream carrying video (muxed or video-only)
  - audio catalog: audio-only streams
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from media_resolver_api.errors import ResourceUnavailableError
from media_resolver_api.models import StreamFormat, VideoCatalog
from media_resolver_api.utils import leading_int

logger = logging.getLogger(__name__)

NO_FORMATS_MESSAGE = "No downloadable formats were found for this video."


@dataclass
class RawStreamDescriptor:
    """One encodable variant of a source video, as reported upstream."""
    selector: int
    container: Optional[str] = None
    quality_label: Optional[str] = None
    has_video: bool = False
    has_audio: bool = False
    bitrate: Optional[int] = None  # bits per second
    audio_bitrate: Optional[int] = None  # kbps
    content_length: Optional[int] = None  # authoritative bytes
    fps: Optional[int] = None
    url: Optional[str] = None


@dataclass
class VideoInfo:
    """Metadata capability result."""
    title: str = ""
    thumbnails: List[str] = field(default_factory=list)
    duration_seconds: Optional[int] = None
    raw_formats: List[RawStreamDescriptor] = field(default_factory=list)


def estimate_size(fmt: RawStreamDescriptor, duration_seconds: Optional[int]) -> int:
    """Authoritative length if known, else bitrate * duration / 8, else 0."""
    if fmt.content_length:
        return int(fmt.content_length)
    if fmt.bitrate and duration_seconds:
        return (int(fmt.bitrate) * int(duration_seconds)) // 8
    return 0


def is_video_format(fmt: RawStreamDescriptor) -> bool:
    return fmt.has_video


def is_audio_format(fmt: RawStreamDescriptor) -> bool:
    return fmt.has_audio and not fmt.has_video


def _video_key(fmt: RawStreamDescriptor) -> Tuple[Optional[str], Optional[str], bool]:
    return (fmt.quality_label, fmt.container, fmt.has_audio)


def build_video_catalog(
    formats: List[RawStreamDescriptor], duration_seconds: Optional[int]
) -> List[StreamFormat]:
    """De-duplicate on (quality, container, audio presence) and rank by resolution."""
    seen = set()
    unique: List[RawStreamDescriptor] = []
    for fmt in formats:
        if not is_video_format(fmt):
            continue
        key = _video_key(fmt)
        if key in seen:
            continue
        seen.add(key)
        unique.append(fmt)

    # sorted() is stable, so equal resolutions keep first-seen order
    unique = sorted(unique, key=lambda f: leading_int(f.quality_label), reverse=True)

    return [
        StreamFormat(
            itag=fmt.selector,
            quality_label=fmt.quality_label,
            container=fmt.container,
            has_audio=fmt.has_audio,
            has_video=fmt.has_video,
            size=estimate_size(fmt, duration_seconds),
            fps=fmt.fps,
            url=fmt.url,
        )
        for fmt in unique
    ]


def build_audio_catalog(
    formats: List[RawStreamDescriptor], duration_seconds: Optional[int]
) -> List[StreamFormat]:
    """De-duplicate by selector and rank by audio bitrate."""
    seen = set()
    unique: List[RawStreamDescriptor] = []
    for fmt in formats:
        if not is_audio_format(fmt) or fmt.selector in seen:
            continue
        seen.add(fmt.selector)
        unique.append(fmt)

    unique = sorted(unique, key=lambda f: f.audio_bitrate or 0, reverse=True)

    return [
        StreamFormat(
            itag=fmt.selector,
            quality_label=f"{fmt.audio_bitrate}kbps" if fmt.audio_bitrate else None,
            container=fmt.container,
            has_audio=fmt.has_audio,
            has_video=fmt.has_video,
            size=estimate_size(fmt, duration_seconds),
            audio_bitrate=fmt.audio_bitrate,
            url=fmt.url,
        )
        for fmt in unique
    ]


def build_catalog(info: VideoInfo) -> VideoCatalog:
    """
    Build the full catalog for a video.

    Raises:
        ResourceUnavailableError: If the source reported no formats at all.
    """
    if not info.raw_formats:
        raise ResourceUnavailableError(NO_FORMATS_MESSAGE, code="no_formats")

    duration = info.duration_seconds
    video_formats = build_video_catalog(info.raw_formats, duration)
    audio_formats = build_audio_catalog(info.raw_formats, duration)

    logger.info(
        f"Catalog for '{info.title[:60]}': {len(info.raw_formats)} raw formats -> "
        f"{len(video_formats)} video, {len(audio_formats)} audio"
    )

    return VideoCatalog(
        title=info.title,
        thumbnail=info.thumbnails[-1] if info.thumbnails else None,
        duration=duration,
        formats=video_formats,
        audio_formats=audio_formats,
        best_audio=audio_formats[0] if audio_formats else None,
    )
