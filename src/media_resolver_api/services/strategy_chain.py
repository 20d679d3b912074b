"""Ordered first-success fallback over independent resolution strategies."""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from media_resolver_api.errors import UpstreamTransientError
from media_resolver_api.models import ResolvedMedia

logger = logging.getLogger(__name__)


class ResolutionStrategy(ABC):
    """One way of turning (url, identifier) into a resolved media descriptor."""

    name: str = "strategy"

    @abstractmethod
    async def attempt(self, url: str, identifier: str) -> Optional[ResolvedMedia]:
        """Return a descriptor, or None when this strategy found nothing."""
        ...


@dataclass
class ExtractionAttempt:
    """Record of one strategy run."""
    strategy: str
    succeeded: bool
    error: Optional[UpstreamTransientError] = None
    elapsed_ms: int = 0


@dataclass
class ChainOutcome:
    result: Optional[ResolvedMedia] = None
    attempts: List[ExtractionAttempt] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def last_error(self) -> Optional[UpstreamTransientError]:
        for attempt in reversed(self.attempts):
            if attempt.error is not None:
                return attempt.error
        return None


async def run_strategy(
    strategy: ResolutionStrategy, url: str, identifier: str
) -> tuple[Optional[ResolvedMedia], ExtractionAttempt]:
    """Run one strategy, converting any failure into an empty result."""
    started = time.monotonic()
    error: Optional[UpstreamTransientError] = None
    result: Optional[ResolvedMedia] = None
    try:
        result = await strategy.attempt(url, identifier)
    except UpstreamTransientError as e:
        error = e
    except Exception as e:
        logger.warning(f"Strategy {strategy.name} raised unexpectedly", exc_info=True)
        error = UpstreamTransientError(f"{strategy.name} failed: {e}")
        error.__cause__ = e

    elapsed_ms = int((time.monotonic() - started) * 1000)
    if error is not None:
        logger.warning(f"Strategy {strategy.name} failed after {elapsed_ms}ms: {error}")
    elif result is None:
        logger.info(f"Strategy {strategy.name} found no media ({elapsed_ms}ms)")
    else:
        logger.info(f"Strategy {strategy.name} resolved {result.type} media ({elapsed_ms}ms)")

    return result, ExtractionAttempt(
        strategy=strategy.name,
        succeeded=result is not None,
        error=error,
        elapsed_ms=elapsed_ms,
    )


async def run_chain(
    strategies: Sequence[ResolutionStrategy], url: str, identifier: str
) -> ChainOutcome:
    """
    Try strategies strictly in order and stop at the first populated result.

    Strategies never run concurrently: a later one only starts after every
    earlier one has come back empty.
    """
    outcome = ChainOutcome()
    for strategy in strategies:
        result, attempt = await run_strategy(strategy, url, identifier)
        outcome.attempts.append(attempt)
        if result is not None:
            outcome.result = result
            break
    return outcome
