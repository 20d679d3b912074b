"""Top-level resolution: route the URL, then hand off per platform."""
from __future__ import annotations

import logging
from typing import Callable, Optional, Type

import httpx

from media_resolver_api.errors import InvalidUrlError
from media_resolver_api.models import Platform, ResolvedMedia, VideoCatalog
from media_resolver_api.services.adapters import get_adapter
from media_resolver_api.services.format_catalog import build_catalog
from media_resolver_api.services.http_fetch import new_client
from media_resolver_api.services.stream_relay import StreamRelay
from media_resolver_api.services.url_router import INVALID_URL_MESSAGES, route_url
from media_resolver_api.services.youtube_service import YouTubeService

logger = logging.getLogger(__name__)

YOUTUBE_CATALOG_MESSAGE = "YouTube links are listed by format. Use the YouTube format catalog."


class MediaResolver:
    """Request-scoped entry point; holds configuration only, never request state."""

    def __init__(
        self,
        rapidapi_key: Optional[str] = None,
        client_factory: Callable[[], httpx.AsyncClient] = new_client,
        youtube: Type[YouTubeService] = YouTubeService,
    ):
        self.rapidapi_key = rapidapi_key
        self.client_factory = client_factory
        self.youtube = youtube

    async def resolve(self, url: str) -> ResolvedMedia:
        """
        Resolve an Instagram or StarMaker share URL to a media descriptor.

        Raises:
            InvalidUrlError, UpstreamBlockedError, ResourceUnavailableError
        """
        routing = route_url(url)
        if routing.platform == Platform.YOUTUBE:
            raise InvalidUrlError(YOUTUBE_CATALOG_MESSAGE)

        options = {}
        if routing.platform == Platform.INSTAGRAM:
            options["rapidapi_key"] = self.rapidapi_key
        adapter = get_adapter(routing.platform, **options)

        logger.info(f"Resolving {routing.platform.value} media {routing.source_id}")
        async with self.client_factory() as client:
            return await adapter.resolve(routing.url, routing.source_id, client)

    def _youtube_url(self, url: str) -> str:
        routing = route_url(url)
        if routing.platform != Platform.YOUTUBE:
            raise InvalidUrlError(INVALID_URL_MESSAGES[Platform.YOUTUBE])
        return routing.source_id

    async def youtube_info(self, url: str) -> VideoCatalog:
        """Fetch and build the ranked format catalog of a YouTube video."""
        video_url = self._youtube_url(url)
        info = await self.youtube.get_info(video_url)
        return build_catalog(info)

    async def open_relay(
        self,
        url: str,
        selector: int,
        title: Optional[str] = None,
        ext: Optional[str] = None,
    ) -> StreamRelay:
        """Locate the selected stream and open the upstream connection."""
        video_url = self._youtube_url(url)
        source = await self.youtube.resolve_stream(video_url, selector)
        relay = StreamRelay(source, title=title, ext=ext)
        return await relay.open()
