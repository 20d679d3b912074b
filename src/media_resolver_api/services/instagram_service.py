"""Instagram resolution strategies.

Tried in order by the Instagram adapter:
  1. public embed page scrape
  2. RapidAPI partner endpoint (only when a key is configured)
  3. cobalt open aggregator
  4. savetik scraping aggregator
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from media_resolver_api.config import settings
from media_resolver_api.models import MediaKind, Platform, ResolvedMedia
from media_resolver_api.services import scrapers
from media_resolver_api.services.http_fetch import fetch_json, fetch_text
from media_resolver_api.services.strategy_chain import ResolutionStrategy
from media_resolver_api.services.url_router import clean_url

logger = logging.getLogger(__name__)

EMBED_URL_TEMPLATE = "https://www.instagram.com/p/{shortcode}/embed/captioned/"

BLOCKED_MESSAGE = (
    "Unable to fetch media from Instagram. The post may be private or "
    "Instagram is blocking automated requests."
)
BLOCKED_SUGGESTION = (
    "For reliable downloads, set RAPIDAPI_KEY or open the post in an external "
    "downloader service."
)


def _media(kind: MediaKind, url: str, **kwargs: Any) -> ResolvedMedia:
    return ResolvedMedia(type=kind, url=url, platform=Platform.INSTAGRAM, **kwargs)


class EmbedScrapeStrategy(ResolutionStrategy):
    """Scrape the public embed rendering of a post."""

    name = "instagram_embed"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        embed_url = EMBED_URL_TEMPLATE.format(shortcode=identifier)
        markup = await fetch_text(self.client, embed_url)
        logger.debug(f"Embed page for {identifier}: {markup[:500]}")

        video_url = scrapers.embed_video_url(markup)
        if video_url:
            return _media(MediaKind.VIDEO, video_url)

        image_url = scrapers.embed_image_url(markup)
        if image_url:
            return _media(MediaKind.IMAGE, image_url)
        return None


class RapidApiStrategy(ResolutionStrategy):
    """Partner resolution API. Skipped when no key is configured."""

    name = "instagram_rapidapi"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        host: Optional[str] = None,
    ):
        self.client = client
        self.api_key = api_key
        self.host = host or settings.RAPIDAPI_HOST

    @property
    def endpoint(self) -> str:
        return f"https://{self.host}/get-info-and-media"

    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        if not self.api_key:
            return None

        data = await fetch_json(
            self.client,
            self.endpoint,
            method="POST",
            json={"url": clean_url(url)},
            headers={
                "Content-Type": "application/json",
                "X-RapidAPI-Key": self.api_key,
                "X-RapidAPI-Host": self.host,
            },
        )
        if not isinstance(data, dict) or data.get("Type") not in ("Post", "Reel"):
            return None

        media_list = data.get("media") or []
        media = media_list[0] if media_list else None
        if not isinstance(media, dict) or not media.get("uri"):
            return None

        kind = MediaKind.VIDEO if media.get("type") == "video" else MediaKind.IMAGE
        return _media(
            kind,
            media["uri"],
            thumbnail=data.get("thumbnail"),
            caption=data.get("caption"),
        )


class CobaltStrategy(ResolutionStrategy):
    """Open aggregation service with stream/redirect/picker answers."""

    name = "instagram_cobalt"

    def __init__(self, client: httpx.AsyncClient, endpoint: Optional[str] = None):
        self.client = client
        self.endpoint = endpoint or settings.COBALT_API_URL

    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        data = await fetch_json(
            self.client,
            self.endpoint,
            method="POST",
            json={"url": clean_url(url), "isNoTTWatermark": True},
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        if not isinstance(data, dict):
            return None
        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> Optional[ResolvedMedia]:
        status = data.get("status")

        if status in ("stream", "redirect"):
            media_url = data.get("url")
            if not media_url:
                return None
            is_video = ".mp4" in media_url or data.get("type") == "video"
            return _media(MediaKind.VIDEO if is_video else MediaKind.IMAGE, media_url)

        if status == "picker":
            urls = [item["url"] for item in data.get("picker") or [] if item.get("url")]
            if not urls:
                return None
            return _media(MediaKind.CAROUSEL, urls[0], urls=urls)

        return None


class SavetikStrategy(ResolutionStrategy):
    """Form-encoded scraping aggregator returning markup with a download link."""

    name = "instagram_savetik"

    def __init__(self, client: httpx.AsyncClient, endpoint: Optional[str] = None):
        self.client = client
        self.endpoint = endpoint or settings.SAVETIK_API_URL

    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        data = await fetch_json(
            self.client,
            self.endpoint,
            method="POST",
            data={"url": clean_url(url)},
        )
        if not isinstance(data, dict) or data.get("status") != "ok" or not data.get("data"):
            return None

        media_url = scrapers.download_link(data["data"])
        if not media_url:
            return None
        kind = MediaKind.VIDEO if ".mp4" in media_url else MediaKind.IMAGE
        return _media(kind, media_url)
