"""Data models for media resolution."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class Platform(str, Enum):
    """Supported source platforms."""
    INSTAGRAM = "instagram"
    STARMAKER = "starmaker"
    YOUTUBE = "youtube"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    CAROUSEL = "carousel"  # multi-item collection


class ResolvedMedia(BaseModel):
    """A directly fetchable media resource resolved from a share URL."""
    type: MediaKind
    url: str = Field(..., min_length=1, description="Direct media URL")
    thumbnail: Optional[str] = None
    title: Optional[str] = None
    caption: Optional[str] = None
    urls: Optional[List[str]] = Field(
        default=None, description="Item URLs, only for carousels"
    )
    platform: Optional[Platform] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def _check_collection(self):
        is_carousel = self.type == MediaKind.CAROUSEL
        if is_carousel and not self.urls:
            raise ValueError("carousel media requires at least one item URL")
        if not is_carousel and self.urls:
            raise ValueError("item URLs are only allowed on carousel media")
        return self


class StreamFormat(BaseModel):
    """One row of a video or audio catalog."""
    itag: int
    quality_label: Optional[str] = None
    container: Optional[str] = None
    has_audio: bool = False
    has_video: bool = False
    size: int = Field(default=0, ge=0, description="Estimated bytes, 0 when unknown")
    fps: Optional[int] = None
    audio_bitrate: Optional[int] = None
    url: Optional[str] = None


class VideoCatalog(BaseModel):
    """Ranked, de-duplicated catalog of a video's downloadable streams."""
    title: str = ""
    thumbnail: Optional[str] = None
    duration: Optional[int] = None
    formats: List[StreamFormat] = Field(default_factory=list)
    audio_formats: List[StreamFormat] = Field(default_factory=list)
    best_audio: Optional[StreamFormat] = None


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class ResolveRequest(BaseModel):
    url: str


class ErrorResponse(BaseModel):
    error: str
    code: str
    fallback: Optional[bool] = None
    suggestion: Optional[str] = None
    shortcode: Optional[str] = None
