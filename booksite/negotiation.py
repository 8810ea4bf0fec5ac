"""Choice between the HTML, JSON and plain-text representations."""
from __future__ import annotations

from enum import Enum

from werkzeug.datastructures import MIMEAccept


class Representation(str, Enum):
    HTML = "html"
    JSON = "json"
    TEXT = "text"


_OFFERED = {
    "text/html": Representation.HTML,
    "application/json": Representation.JSON,
}


def negotiate(accept: MIMEAccept, *, html_enabled: bool = True) -> Representation:
    """Return the representation preferred by ``accept``.

    Text is the fallback whenever nothing offered is acceptable, so the
    negotiation never fails with a 406.
    """
    offered = [mimetype for mimetype, kind in _OFFERED.items() if html_enabled or kind is not Representation.HTML]
    match = accept.best_match(offered)
    if match is None:
        return Representation.TEXT
    return _OFFERED[match]


__all__ = ["Representation", "negotiate"]
