"""StarMaker platform adapter: CDN existence checks plus share page enrichment."""
from __future__ import annotations

import logging
from typing import List

import httpx

from media_resolver_api.errors import ResourceUnavailableError
from media_resolver_api.models import Platform, ResolvedMedia
from media_resolver_api.services.starmaker_service import (
    PRIMARY_CDN,
    SECONDARY_CDN,
    UNAVAILABLE_MESSAGE,
    CdnCheckStrategy,
    enrich_from_share_page,
)
from media_resolver_api.services.strategy_chain import ResolutionStrategy
from .base import PlatformAdapter
from . import register_adapter

logger = logging.getLogger(__name__)


class StarMakerAdapter(PlatformAdapter):
    """Resolves StarMaker recordings by recordingId."""

    def __init__(self, enrich: bool = True):
        self.enrich = enrich

    @staticmethod
    def platform_name() -> Platform:
        return Platform.STARMAKER

    def build_strategies(self, client: httpx.AsyncClient) -> List[ResolutionStrategy]:
        return [
            CdnCheckStrategy(client, PRIMARY_CDN, name="starmaker_primary_cdn"),
            CdnCheckStrategy(client, SECONDARY_CDN, name="starmaker_secondary_cdn"),
        ]

    async def resolve(self, url: str, source_id: str, client: httpx.AsyncClient) -> ResolvedMedia:
        outcome = await self.run(url, source_id, client)
        if outcome.result is None:
            logger.warning(f"StarMaker recording {source_id} not found on any CDN")
            raise ResourceUnavailableError(UNAVAILABLE_MESSAGE)

        if not self.enrich:
            return outcome.result
        return await enrich_from_share_page(client, url, outcome.result)


register_adapter(StarMakerAdapter)
