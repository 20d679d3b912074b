"""Thin HTTP helpers shared by the resolution strategies.

Every helper turns transport errors, timeouts, non-2xx answers and undecodable
bodies into ``UpstreamTransientError`` so strategies deal with a single failure
type.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from media_resolver_api.config import settings
from media_resolver_api.errors import UpstreamTransientError

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def new_client(timeout: Optional[float] = None, **kwargs: Any) -> httpx.AsyncClient:
    """Create a per-request async client with the configured upstream timeout."""
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECS,
        follow_redirects=True,
        headers=BROWSER_HEADERS,
        **kwargs,
    )


async def _send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise UpstreamTransientError(f"{method} {url} timed out") from e
    except httpx.HTTPError as e:
        raise UpstreamTransientError(f"{method} {url} failed: {e}") from e

    if not response.is_success:
        raise UpstreamTransientError(
            f"{method} {url} returned HTTP {response.status_code}"
        )
    return response


async def fetch_text(client: httpx.AsyncClient, url: str, method: str = "GET", **kwargs: Any) -> str:
    """Fetch a URL and return the body as text."""
    response = await _send(client, method, url, **kwargs)
    return response.text


async def fetch_json(client: httpx.AsyncClient, url: str, method: str = "GET", **kwargs: Any) -> Any:
    """Fetch a URL and decode the body as JSON."""
    response = await _send(client, method, url, **kwargs)
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise UpstreamTransientError(f"{method} {url} returned an unparsable body") from e


async def head_ok(client: httpx.AsyncClient, url: str) -> bool:
    """Metadata-only existence check. True on a 2xx answer, False otherwise."""
    try:
        await _send(client, "HEAD", url)
    except UpstreamTransientError as e:
        logger.info(f"HEAD check failed: {e}")
        return False
    return True
