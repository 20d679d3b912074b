"""Unit tests for data models."""
import pytest
from pydantic import ValidationError

from media_resolver_api.models import (
    MediaKind,
    Platform,
    ResolvedMedia,
    StreamFormat,
    VideoCatalog,
)


class TestModels:
    """Test cases for data models."""

    def test_resolved_media_creation(self):
        media = ResolvedMedia(type=MediaKind.VIDEO, url="https://cdn.test/v.mp4", platform=Platform.INSTAGRAM)

        assert media.type == "video"
        assert media.platform == "instagram"
        assert media.urls is None

    def test_resolved_media_requires_url(self):
        with pytest.raises(ValidationError):
            ResolvedMedia(type=MediaKind.IMAGE, url="")

    def test_carousel_requires_items(self):
        with pytest.raises(ValidationError):
            ResolvedMedia(type=MediaKind.CAROUSEL, url="https://cdn.test/1.jpg")

    def test_items_only_on_carousel(self):
        with pytest.raises(ValidationError):
            ResolvedMedia(type=MediaKind.IMAGE, url="https://cdn.test/1.jpg", urls=["https://cdn.test/1.jpg"])

    def test_carousel_creation(self):
        urls = ["https://cdn.test/1.jpg", "https://cdn.test/2.mp4"]
        media = ResolvedMedia(type=MediaKind.CAROUSEL, url=urls[0], urls=urls)
        assert media.urls == urls

    def test_stream_format_size_non_negative(self):
        assert StreamFormat(itag=18).size == 0
        with pytest.raises(ValidationError):
            StreamFormat(itag=18, size=-1)

    def test_video_catalog_defaults(self):
        catalog = VideoCatalog()
        assert catalog.formats == []
        assert catalog.audio_formats == []
        assert catalog.best_audio is None
