"""API routes for media resolution."""

import logging
from importlib import metadata
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from media_resolver_api.config import settings
from media_resolver_api.models import ErrorResponse, ResolvedMedia, ResolveRequest, VideoCatalog
from media_resolver_api.services.media_resolver import MediaResolver

logger = logging.getLogger(__name__)

SERVICE_NAME = "media-resolver-api"

router = APIRouter()

RESOLVE_ERRORS = {
    400: {"model": ErrorResponse, "description": "Unsupported or malformed URL"},
    404: {"model": ErrorResponse, "description": "Media not found"},
    502: {"model": ErrorResponse, "description": "Upstream failure"},
}


def get_resolver() -> MediaResolver:
    """Build a resolver from process-wide settings."""
    return MediaResolver(rapidapi_key=settings.RAPIDAPI_KEY)


# ---------------------------------------------------------------------------
# Version / health
# ---------------------------------------------------------------------------


@router.get("/version")
def get_version():
    """Get API version information."""
    try:
        version = metadata.version(SERVICE_NAME)
    except metadata.PackageNotFoundError:
        version = "unknown"
    return {"service": SERVICE_NAME, "version": version, "environment": settings.ENVIRONMENT}


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


# ---------------------------------------------------------------------------
# Instagram / StarMaker
# ---------------------------------------------------------------------------


@router.post(
    "/download",
    response_model=ResolvedMedia,
    response_model_exclude_none=True,
    responses={
        **RESOLVE_ERRORS,
        503: {"model": ErrorResponse, "description": "Every Instagram strategy failed"},
    },
)
async def download(payload: ResolveRequest, resolver: MediaResolver = Depends(get_resolver)):
    """Resolve an Instagram or StarMaker URL to a directly fetchable media URL."""
    return await resolver.resolve(payload.url)


# ---------------------------------------------------------------------------
# YouTube
# ---------------------------------------------------------------------------


@router.post("/youtube/info", response_model=VideoCatalog, responses=RESOLVE_ERRORS)
async def youtube_info(payload: ResolveRequest, resolver: MediaResolver = Depends(get_resolver)):
    """List a YouTube video's downloadable formats, best first."""
    return await resolver.youtube_info(payload.url)


@router.get("/youtube/download", responses=RESOLVE_ERRORS)
async def youtube_download(
    url: str = Query(...),
    itag: int = Query(..., description="Selector of the stream to relay"),
    title: Optional[str] = Query("video"),
    ext: Optional[str] = Query("mp4"),
    resolver: MediaResolver = Depends(get_resolver),
):
    """Stream the selected format back as an attachment."""
    relay = await resolver.open_relay(url, itag, title=title, ext=ext)
    return StreamingResponse(
        relay.iter_bytes(),
        media_type=relay.media_type,
        headers=relay.headers,
        background=BackgroundTask(relay.aclose),
    )
