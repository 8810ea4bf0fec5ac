"""State handed to the request handlers.

:class:`SiteContext` is built once per application and stored in
``app.extensions["booksite"]``; :class:`RequestContext` lives on
``flask.g`` for the duration of one request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from flask import current_app, g

from .negotiation import Representation
from .config import ServerOptions
from .services.i18n import Localizer

EXTENSION_KEY = "booksite"


@dataclass(frozen=True)
class SiteContext:
    options: ServerOptions
    logger: logging.Logger
    log_prefix: str
    localizer: Optional[Localizer] = None


@dataclass
class RequestContext:
    representation: Representation
    started: float
    locale: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    # set once the error handler has written the log line for this request
    logged: bool = False

    def elapsed_ms(self, now: float) -> int:
        return int(round((now - self.started) * 1000))


def current_site() -> SiteContext:
    site = current_app.extensions.get(EXTENSION_KEY)
    if not isinstance(site, SiteContext):  # pragma: no cover - configuration
        raise RuntimeError("booksite extension not initialised")
    return site


def current_request() -> Optional[RequestContext]:
    return g.get("booksite_request")


__all__ = ["EXTENSION_KEY", "RequestContext", "SiteContext", "current_request", "current_site"]
