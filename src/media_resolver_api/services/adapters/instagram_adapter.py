"""Instagram platform adapter: embed scrape, partner API, then aggregators."""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from media_resolver_api.errors import UpstreamBlockedError
from media_resolver_api.models import Platform, ResolvedMedia
from media_resolver_api.services.instagram_service import (
    BLOCKED_MESSAGE,
    BLOCKED_SUGGESTION,
    CobaltStrategy,
    EmbedScrapeStrategy,
    RapidApiStrategy,
    SavetikStrategy,
)
from media_resolver_api.services.strategy_chain import ResolutionStrategy
from .base import PlatformAdapter
from . import register_adapter

logger = logging.getLogger(__name__)


class InstagramAdapter(PlatformAdapter):
    """Resolves Instagram posts, reels and stories."""

    def __init__(self, rapidapi_key: Optional[str] = None):
        self.rapidapi_key = rapidapi_key

    @staticmethod
    def platform_name() -> Platform:
        return Platform.INSTAGRAM

    def build_strategies(self, client: httpx.AsyncClient) -> List[ResolutionStrategy]:
        strategies: List[ResolutionStrategy] = [EmbedScrapeStrategy(client)]
        if self.rapidapi_key:
            strategies.append(RapidApiStrategy(client, self.rapidapi_key))
        strategies.append(CobaltStrategy(client))
        strategies.append(SavetikStrategy(client))
        return strategies

    async def resolve(self, url: str, source_id: str, client: httpx.AsyncClient) -> ResolvedMedia:
        outcome = await self.run(url, source_id, client)
        if outcome.result is not None:
            return outcome.result

        tried = ", ".join(a.strategy for a in outcome.attempts)
        logger.warning(f"All Instagram strategies failed for {source_id} (tried: {tried})")
        raise UpstreamBlockedError(
            BLOCKED_MESSAGE,
            shortcode=source_id,
            suggestion=BLOCKED_SUGGESTION,
        )


register_adapter(InstagramAdapter)
