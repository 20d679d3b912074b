"""Base classes for platform adapters."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

import httpx

from media_resolver_api.models import Platform, ResolvedMedia
from media_resolver_api.services.strategy_chain import (
    ChainOutcome,
    ResolutionStrategy,
    run_chain,
)


class PlatformAdapter(ABC):
    """Resolves share URLs of one platform through an ordered strategy chain."""

    @staticmethod
    @abstractmethod
    def platform_name() -> Platform:
        """Return the platform this adapter handles."""
        ...

    @abstractmethod
    def build_strategies(self, client: httpx.AsyncClient) -> List[ResolutionStrategy]:
        """Return the strategies to try, highest priority first."""
        ...

    @abstractmethod
    async def resolve(self, url: str, source_id: str, client: httpx.AsyncClient) -> ResolvedMedia:
        """Resolve the URL or raise a terminal MediaResolverError."""
        ...

    async def run(self, url: str, source_id: str, client: httpx.AsyncClient) -> ChainOutcome:
        return await run_chain(self.build_strategies(client), url, source_id)
