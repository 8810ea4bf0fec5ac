"""Central error handling: every failure of every route ends up here."""
from __future__ import annotations

import time
import traceback
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

from flask import Blueprint, Response, jsonify, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from ..context import current_request, current_site
from ..exceptions import UpstreamFailure
from ..negotiation import Representation
from .site import render_view, request_url, text_response

bp = Blueprint("errors", __name__)


@dataclass
class ErrorRecord:
    status: int
    message: str
    error: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def status_of(exc: BaseException) -> int:
    if isinstance(exc, HTTPException) and exc.code:
        return exc.code
    status = getattr(exc, "status_code", None)
    if isinstance(status, int) and 400 <= status <= 599:
        return status
    return 500


def message_of(exc: BaseException) -> str:
    if isinstance(exc, HTTPException):
        return exc.name
    if isinstance(exc, UpstreamFailure):
        return exc.message
    return str(exc) or exc.__class__.__name__


def build_record(exc: BaseException, *, development: bool) -> ErrorRecord:
    """Describe ``exc``; internals are only exposed in development."""
    status = status_of(exc)
    message = message_of(exc)
    detail: Dict[str, Any] = {}
    if development:
        detail = {
            "type": exc.__class__.__name__,
            "message": str(exc) or message,
            "status": status,
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return ErrorRecord(status=status, message=message, error=detail)


def log_failure(record: ErrorRecord, exc: BaseException) -> None:
    site = current_site()
    ctx = current_request()
    elapsed = ctx.elapsed_ms(time.perf_counter()) if ctx is not None else 0
    line = "%s : HTTP %s %s %s %sms - %s"
    args = (site.log_prefix, request.method, request_url(), record.status, elapsed, record.message)
    if record.status >= 500:
        site.logger.error(line, *args, exc_info=(type(exc), exc, exc.__traceback__))
    else:
        site.logger.warning(line, *args)


@bp.app_errorhandler(Exception)
def handle_error(exc: Exception) -> Any:
    site = current_site()
    if isinstance(exc, MethodNotAllowed):
        # only GET routes exist, so any other method is an unmatched path
        exc = NotFound()
    record = build_record(exc, development=site.options.is_development)
    log_failure(record, exc)

    ctx = current_request()
    if ctx is not None:
        ctx.logged = True
    representation = ctx.representation if ctx is not None else Representation.TEXT
    if representation is Representation.HTML:
        template = "404" if record.status == 404 else "500"
        body = render_view(template, root_url=site.options.root_url, error=record)
        return body, record.status
    if representation is Representation.JSON:
        response: Response = jsonify({"error": record.to_dict()})
        response.status_code = record.status
        return response
    return text_response(record.message, status=record.status)


__all__ = ["ErrorRecord", "bp", "build_record", "handle_error", "message_of", "status_of"]
