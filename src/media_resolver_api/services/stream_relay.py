"""
Relay a selected YouTube stream to the caller as a downloadable attachment.

Upstream bytes are pulled by a producer task into a bounded in-memory buffer
so short upstream stalls do not starve the outgoing response. A broken
upstream aborts the relay; there is no resume or retry.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

import anyio
import httpx

from media_resolver_api.config import settings
from media_resolver_api.errors import (
    RelayAbortedError,
    ResourceUnavailableError,
    UpstreamTransientError,
)
from media_resolver_api.services.youtube_service import StreamSource
from media_resolver_api.utils import safe_filename

logger = logging.getLogger(__name__)

_EOF = object()


class StreamRelay:
    """One relayed stream; scoped to a single response."""

    def __init__(
        self,
        source: StreamSource,
        title: Optional[str] = None,
        ext: Optional[str] = None,
        *,
        buffer_bytes: Optional[int] = None,
        chunk_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.source = source
        self.filename = safe_filename(title, ext or source.container)
        self.buffer_bytes = buffer_bytes or settings.RELAY_BUFFER_BYTES
        self.chunk_bytes = chunk_bytes or settings.RELAY_CHUNK_BYTES
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._response: Optional[httpx.Response] = None
        self.bytes_relayed = 0

    @property
    def buffer_slots(self) -> int:
        return max(1, self.buffer_bytes // self.chunk_bytes)

    async def open(self) -> "StreamRelay":
        """
        Send the upstream request and check its status before any byte is relayed.

        Raises:
            ResourceUnavailableError: upstream answered 403/404/410
            UpstreamTransientError: any other transport failure or non-2xx answer
        """
        client_kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECS),
            "follow_redirects": True,
            "headers": self.source.headers,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        self._client = httpx.AsyncClient(**client_kwargs)

        try:
            request = self._client.build_request("GET", self.source.url)
            self._response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            await self.aclose()
            raise UpstreamTransientError("Failed to download video") from e

        status = self._response.status_code
        if not self._response.is_success:
            await self.aclose()
            if status in (403, 404, 410):
                raise ResourceUnavailableError("This stream is no longer available.")
            raise UpstreamTransientError(f"Failed to download video (HTTP {status})")

        logger.info(f"Relaying format {self.source.selector} as {self.filename}")
        return self

    @property
    def media_type(self) -> str:
        if self._response is not None:
            content_type = self._response.headers.get("content-type")
            if content_type:
                return content_type
        return "application/octet-stream"

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Disposition": f'attachment; filename="{self.filename}"'}
        if self._response is None:
            return headers
        upstream = self._response.headers
        # Bodies are relayed decoded, so an encoded length would not match.
        encoding = upstream.get("content-encoding", "identity").strip().lower()
        if upstream.get("content-length") and encoding == "identity":
            headers["Content-Length"] = upstream["content-length"]
        return headers

    async def _pump(self, queue: asyncio.Queue) -> None:
        try:
            async for chunk in self._response.aiter_bytes(self.chunk_bytes):
                await queue.put(chunk)
        except Exception as e:
            await queue.put(e)
            return
        await queue.put(_EOF)

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """
        Yield upstream bytes until the stream ends.

        Raises:
            RelayAbortedError: the upstream stream failed mid-way
        """
        if self._response is None:
            raise RuntimeError("StreamRelay.open() must be awaited before iterating")

        queue: asyncio.Queue = asyncio.Queue(maxsize=self.buffer_slots)
        producer = asyncio.create_task(self._pump(queue))
        try:
            while True:
                item = await queue.get()
                if item is _EOF:
                    break
                if isinstance(item, Exception):
                    logger.error(
                        f"Upstream stream failed after {self.bytes_relayed} bytes: {item}"
                    )
                    raise RelayAbortedError("Download interrupted. Please try again.") from item
                self.bytes_relayed += len(item)
                yield item
        finally:
            # Runs on completion, on abort and when the caller disconnects.
            # A disconnect cancels the response task, so cleanup is shielded.
            producer.cancel()
            with anyio.CancelScope(shield=True):
                try:
                    await asyncio.wait([producer])
                finally:
                    await self.aclose()

    async def aclose(self) -> None:
        """Release the upstream response and client. Safe to call repeatedly."""
        response, self._response = self._response, None
        client, self._client = self._client, None
        with anyio.CancelScope(shield=True):
            if response is not None:
                await response.aclose()
            if client is not None:
                await client.aclose()
