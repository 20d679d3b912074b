"""Error taxonomy for media resolution.

Every terminal failure carries a short, non-technical ``message`` suitable for
display, a machine-readable ``code`` and the HTTP status the API answers with.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class MediaResolverError(RuntimeError):
    """Base class for all resolution failures."""

    code: str = "error"
    status_code: int = 500

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class InvalidUrlError(MediaResolverError):
    """The input URL is not recognised or not well-formed. Never retried."""

    code = "invalid_url"
    status_code = 400


class UpstreamBlockedError(MediaResolverError):
    """Every Instagram strategy came back empty."""

    code = "upstream_blocked"
    status_code = 503

    def __init__(
        self,
        message: str,
        *,
        shortcode: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        super().__init__(message)
        self.shortcode = shortcode
        self.suggestion = suggestion
        self.fallback = True

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["fallback"] = self.fallback
        if self.suggestion:
            data["suggestion"] = self.suggestion
        if self.shortcode:
            data["shortcode"] = self.shortcode
        return data


class ResourceUnavailableError(MediaResolverError):
    """The addressed recording or video does not exist or has nothing to serve."""

    code = "resource_unavailable"
    status_code = 404


class UpstreamTransientError(MediaResolverError):
    """A single upstream call failed (network, non-2xx, timeout, bad body)."""

    code = "upstream_error"
    status_code = 502


class RelayAbortedError(MediaResolverError):
    """The upstream stream broke while bytes were being relayed."""

    code = "relay_aborted"
    status_code = 502
