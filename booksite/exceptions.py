"""Exception hierarchy shared by the configuration layer and the routes."""
from __future__ import annotations

from typing import Optional


class BookSiteError(Exception):
    """Base class for every error raised by :mod:`booksite`."""


class ConfigurationError(BookSiteError):
    """Settings are missing or malformed.  Raised before the listener binds."""


class UpstreamFailure(BookSiteError):
    """A collaborator (filesystem, manifest, search) failed during a request."""

    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ManifestError(UpstreamFailure):
    """``book.json`` is missing, unreadable, not JSON or lacks the versions list."""


class PdfSearchError(UpstreamFailure):
    """Walking the PDF tree failed (permissions, vanished directory...)."""


__all__ = [
    "BookSiteError",
    "ConfigurationError",
    "ManifestError",
    "PdfSearchError",
    "UpstreamFailure",
]
