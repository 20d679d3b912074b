"""Route a share URL to its platform and platform-specific identifier."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from media_resolver_api.errors import InvalidUrlError
from media_resolver_api.models import Platform


@dataclass
class RoutingResult:
    """Result of routing a URL."""
    platform: Platform
    source_id: str
    url: str


# Each entry: (compiled_pattern, platform). Evaluated in order, first match wins.
_DOMAIN_PATTERNS: List[Tuple[re.Pattern, Platform]] = [
    (re.compile(r"instagram\.com", re.IGNORECASE), Platform.INSTAGRAM),
    (re.compile(r"starmakerstudios\.com|starmaker\.co", re.IGNORECASE), Platform.STARMAKER),
    (re.compile(r"youtube\.com|youtu\.be", re.IGNORECASE), Platform.YOUTUBE),
]

INSTAGRAM_URL_RE = re.compile(
    r"^https?://(www\.)?instagram\.com/"
    r"((p|reel|reels)/[A-Za-z0-9_-]+|stories/[^/]+/\d+)"
)
YOUTUBE_URL_RE = re.compile(r"^(https?://)?(www\.|m\.)?(youtube\.com|youtu\.be)/.+$")

# The first capture group must be the short code (or numeric story id).
_INSTAGRAM_ID_PATTERNS: List[re.Pattern] = [
    re.compile(r"instagram\.com/p/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/reel/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/reels?/([A-Za-z0-9_-]+)"),
    re.compile(r"instagram\.com/stories/[^/]+/(\d+)"),
]

_URL_IN_TEXT_RE = re.compile(r"(https?://[^\s]+)")

INVALID_URL_MESSAGES = {
    Platform.INSTAGRAM: "Please enter a valid Instagram post, reel, or story URL",
    Platform.STARMAKER: "Please enter a valid StarMaker recording URL",
    Platform.YOUTUBE: "Please enter a valid YouTube URL",
}
UNSUPPORTED_URL_MESSAGE = "Unsupported URL. Please use Instagram, StarMaker, or YouTube links."


def extract_url(text: str) -> str:
    """Pull the first http(s) URL out of pasted text, or return the text as-is."""
    if not text:
        return ""
    match = _URL_IN_TEXT_RE.search(text)
    return match.group(1) if match else text.strip()


def clean_url(url: str) -> str:
    """Drop query string and fragment, keeping scheme, host and path."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.netloc:
        return url
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


def classify(url: str) -> Optional[Platform]:
    """Determine which supported platform a URL belongs to."""
    if not url:
        return None
    for pattern, platform in _DOMAIN_PATTERNS:
        if pattern.search(url):
            return platform
    return None


def _recording_id(url: str) -> Optional[str]:
    try:
        query = parse_qs(urlparse(url).query)
    except ValueError:
        return None
    for value in query.get("recordingId", []):
        if value.isdigit():
            return value
    return None


def validate(url: str, platform: Optional[Platform]) -> bool:
    """Check that a URL is well-formed for its platform. Never raises."""
    if not url or platform is None:
        return False
    if platform == Platform.INSTAGRAM:
        return bool(INSTAGRAM_URL_RE.match(url))
    if platform == Platform.STARMAKER:
        return _recording_id(url) is not None
    if platform == Platform.YOUTUBE:
        return bool(YOUTUBE_URL_RE.match(url))
    return False


def extract_identifier(url: str, platform: Optional[Platform]) -> Optional[str]:
    """
    Extract the identifier needed to address the resource.

    - Instagram: short code (or numeric story id)
    - StarMaker: numeric recordingId
    - YouTube: the full URL is the handle
    """
    if not url or platform is None:
        return None
    if platform == Platform.INSTAGRAM:
        for pattern in _INSTAGRAM_ID_PATTERNS:
            match = pattern.search(url)
            if match:
                return match.group(1)
        return None
    if platform == Platform.STARMAKER:
        return _recording_id(url)
    if platform == Platform.YOUTUBE:
        return url
    return None


def route_url(url: str) -> RoutingResult:
    """
    Classify, validate and extract in one step.

    Raises:
        InvalidUrlError: If the URL is unsupported or malformed for its platform.
    """
    url = extract_url(url)
    platform = classify(url)
    if platform is None:
        raise InvalidUrlError(UNSUPPORTED_URL_MESSAGE)
    if not validate(url, platform):
        raise InvalidUrlError(INVALID_URL_MESSAGES[platform])
    source_id = extract_identifier(url, platform)
    if not source_id:
        raise InvalidUrlError(INVALID_URL_MESSAGES[platform])
    return RoutingResult(platform=platform, source_id=source_id, url=url)
