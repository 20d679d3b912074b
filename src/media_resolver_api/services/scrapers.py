"""
Markup extraction helpers.

Each upstream page shape gets exactly one named function so a markup change
only touches the matching pattern here.
"""
from __future__ import annotations

import html
import re
from typing import Optional

from media_resolver_api.utils import unescape_url

# Instagram embed page
EMBED_VIDEO_RE = re.compile(r'"video_url"\s*:\s*"([^"]+)"')
EMBED_DISPLAY_RE = re.compile(r'"display_url"\s*:\s*"([^"]+)"')
EMBED_IMAGE_TAG_RE = re.compile(
    r'<img[^>]+class="[^"]*EmbeddedMediaImage[^"]*"[^>]+src="([^"]+)"', re.IGNORECASE
)

# savetik-style aggregator markup
DOWNLOAD_HREF_RE = re.compile(r'href="(https?://[^"]+(?:\.mp4|\.jpg)[^"]*)"', re.IGNORECASE)

# Open Graph meta tags (either attribute order)
_OG_TAG_TEMPLATE = (
    r'<meta[^>]+property=["\']og:{name}["\'][^>]+content=["\']([^"\']*)["\']'
    r'|<meta[^>]+content=["\']([^"\']*)["\'][^>]+property=["\']og:{name}["\']'
)
OG_TITLE_RE = re.compile(_OG_TAG_TEMPLATE.format(name="title"), re.IGNORECASE)
OG_IMAGE_RE = re.compile(_OG_TAG_TEMPLATE.format(name="image"), re.IGNORECASE)


def embed_video_url(markup: str) -> Optional[str]:
    """Video source from an Instagram embed page."""
    match = EMBED_VIDEO_RE.search(markup or "")
    return unescape_url(match.group(1)) if match else None


def embed_image_url(markup: str) -> Optional[str]:
    """Image source from an Instagram embed page."""
    if not markup:
        return None
    match = EMBED_DISPLAY_RE.search(markup) or EMBED_IMAGE_TAG_RE.search(markup)
    return unescape_url(match.group(1)) if match else None


def download_link(markup: str) -> Optional[str]:
    """First .mp4/.jpg download href in aggregator markup."""
    match = DOWNLOAD_HREF_RE.search(markup or "")
    return html.unescape(match.group(1)) if match else None


def _og_content(pattern: re.Pattern, markup: str) -> Optional[str]:
    match = pattern.search(markup or "")
    if not match:
        return None
    value = html.unescape(match.group(1) or match.group(2) or "").strip()
    return value or None


def og_title(markup: str) -> Optional[str]:
    return _og_content(OG_TITLE_RE, markup)


def og_image(markup: str) -> Optional[str]:
    return _og_content(OG_IMAGE_RE, markup)
