"""StarMaker recording resolution via known CDN paths."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from media_resolver_api.errors import UpstreamTransientError
from media_resolver_api.models import MediaKind, Platform, ResolvedMedia
from media_resolver_api.services import scrapers
from media_resolver_api.services.http_fetch import fetch_text, head_ok
from media_resolver_api.services.strategy_chain import ResolutionStrategy

logger = logging.getLogger(__name__)

PRIMARY_CDN = "https://static.starmakerstudios.com"
SECONDARY_CDN = "https://static.starmaker.co"
RECORDING_PATH_TEMPLATE = "/production/uploading/recordings/{recording_id}/master.mp4"

UNAVAILABLE_MESSAGE = "Recording unavailable. It may have been removed or made private."


def recording_url(cdn_host: str, recording_id: str) -> str:
    return cdn_host.rstrip("/") + RECORDING_PATH_TEMPLATE.format(recording_id=recording_id)


def default_title(recording_id: str) -> str:
    return f"StarMaker Recording {recording_id}"


class CdnCheckStrategy(ResolutionStrategy):
    """HEAD-check the templated recording URL on one CDN host."""

    def __init__(self, client: httpx.AsyncClient, cdn_host: str, name: str):
        self.client = client
        self.cdn_host = cdn_host
        self.name = name

    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        media_url = recording_url(self.cdn_host, identifier)
        if not await head_ok(self.client, media_url):
            return None
        return ResolvedMedia(
            type=MediaKind.VIDEO,
            url=media_url,
            title=default_title(identifier),
            platform=Platform.STARMAKER,
        )


async def enrich_from_share_page(
    client: httpx.AsyncClient, share_url: str, media: ResolvedMedia
) -> ResolvedMedia:
    """
    Fill title and thumbnail from the share page's Open Graph tags.

    Failure here is never fatal: the media is returned unchanged.
    """
    try:
        markup = await fetch_text(client, share_url)
    except UpstreamTransientError as e:
        logger.info(f"StarMaker share page enrichment skipped: {e}")
        return media

    updates = {}
    title = scrapers.og_title(markup)
    if title:
        updates["title"] = title
    thumbnail = scrapers.og_image(markup)
    if thumbnail:
        updates["thumbnail"] = thumbnail
    return media.model_copy(update=updates) if updates else media
