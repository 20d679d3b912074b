"""Utility functions."""
import html
import re
from typing import Any, Optional

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")
_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9]")


def to_int(s: Any) -> Optional[int]:
    """Convert a value to int, returning None if conversion fails."""
    try:
        return int(s) if s is not None else None
    except Exception:
        return None


def leading_int(txt: Optional[str]) -> int:
    """Numeric prefix of a label like '720p60' (-> 720); 0 when absent."""
    if not txt:
        return 0
    match = _LEADING_INT_RE.match(txt)
    return int(match.group(1)) if match else 0


def safe_filename(title: Optional[str], ext: Optional[str] = None) -> str:
    """Build an attachment filename from a free-form title."""
    stem = _UNSAFE_FILENAME_RE.sub("_", title or "") or "video"
    extension = _UNSAFE_FILENAME_RE.sub("", ext or "") or "mp4"
    return f"{stem}.{extension}"


def unescape_url(url: str) -> str:
    """Undo JSON/HTML escaping commonly found in scraped media URLs."""
    url = url.replace("\\/", "/")
    url = re.sub(r"\\u0026", "&", url, flags=re.IGNORECASE)
    return html.unescape(url)
