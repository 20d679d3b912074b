"""
Test fixtures for media-resolver-api.

Upstream HTTP is replaced with httpx.MockTransport handlers so every test runs
offline and deterministically.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import media_resolver_api...`
for p in {ROOT, SRC}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from media_resolver_api.main import app  # noqa: E402
from media_resolver_api.api.routes import get_resolver  # noqa: E402


# ---------------------------------------------------------------------------
# Core Test Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """Per-test FastAPI TestClient; resolver overrides are reset afterwards."""
    yield TestClient(app)
    app.dependency_overrides.pop(get_resolver, None)


# ---------------------------------------------------------------------------
# Upstream HTTP
# ---------------------------------------------------------------------------


class UpstreamRecorder:
    """Routes mock requests by URL prefix and records every call."""

    def __init__(self, routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        url = str(request.url)
        for prefix, handler in self.routes.items():
            if url.startswith(prefix):
                return handler(request)
        return httpx.Response(404)

    def called(self, prefix: str) -> int:
        return sum(1 for r in self.calls if str(r.url).startswith(prefix))


@pytest.fixture
def upstream():
    """Factory: upstream({prefix: handler}) -> (recorder, AsyncClient)."""

    def _make(routes: Dict[str, Callable[[httpx.Request], httpx.Response]]):
        recorder = UpstreamRecorder(routes)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        return recorder, http_client

    return _make


# ---------------------------------------------------------------------------
# yt-dlp sample data
# ---------------------------------------------------------------------------


def ytdlp_format(format_id: str, **kwargs: Any) -> Dict[str, Any]:
    fmt = {
        "format_id": format_id,
        "ext": "mp4",
        "vcodec": "none",
        "acodec": "none",
        "url": f"https://rr1.googlevideo.com/videoplayback?itag={format_id}",
        "http_headers": {"User-Agent": "Mozilla/5.0"},
    }
    fmt.update(kwargs)
    return fmt


@pytest.fixture
def ytdlp_info() -> Dict[str, Any]:
    """A trimmed yt-dlp extract_info() result."""
    return {
        "title": "Never Gonna Give You Up",
        "duration": 212,
        "thumbnails": [
            {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg"},
            {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"},
        ],
        "formats": [
            ytdlp_format("sb0", ext="mhtml", format_note="storyboard"),
            ytdlp_format("18", vcodec="avc1.42001E", acodec="mp4a.40.2", height=360, fps=25, tbr=500.5, filesize=13_000_000),
            ytdlp_format("137", vcodec="avc1.640028", height=1080, fps=25, tbr=4400.0),
            ytdlp_format("22", vcodec="avc1.64001F", acodec="mp4a.40.2", height=720, fps=25, tbr=1200.0),
            ytdlp_format("248", ext="webm", vcodec="vp9", height=1080, fps=25, tbr=2600.0),
            ytdlp_format("140", ext="m4a", acodec="mp4a.40.2", abr=129.5, filesize=3_400_000),
            ytdlp_format("251", ext="webm", acodec="opus", abr=160.0),
            ytdlp_format("139", ext="m4a", acodec="mp4a.40.5", abr=48.0),
        ],
    }
