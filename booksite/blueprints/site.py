"""Routes of the book site: manifest index, PDF downloads and static files."""
from __future__ import annotations

import json
import os
import posixpath
import time
from typing import Any

from flask import (
    Blueprint,
    Response,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    send_from_directory,
)
from werkzeug.exceptions import NotFound
from werkzeug.security import safe_join

from ..context import RequestContext, current_request, current_site
from ..negotiation import Representation, negotiate
from ..services.manifest import read_manifest, summarize
from ..services.pdf_lookup import find_pdf

bp = Blueprint("site", __name__, template_folder="../templates")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "Referrer-Policy": "no-referrer",
}

FAVICON_MAX_AGE = 86400


def request_url() -> str:
    query = request.query_string.decode("latin-1")
    return f"{request.path}?{query}" if query else request.path


def render_view(name: str, **context: Any) -> str:
    site = current_site()
    return render_template(f"{name}.{site.options.view_engine}", **context)


def text_response(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


@bp.before_app_request
def open_request_context() -> None:
    site = current_site()
    locale = None
    if site.localizer is not None:
        locale = site.localizer.select(request.args, request.accept_languages)
    g.booksite_request = RequestContext(
        representation=negotiate(request.accept_mimetypes, html_enabled=site.options.html_enabled),
        started=time.perf_counter(),
        locale=locale,
        params=dict(request.view_args or {}),
    )


@bp.after_app_request
def finish_response(response: Response) -> Response:
    site = current_site()
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    ctx = current_request()
    if ctx is not None and ctx.locale:
        response.headers["Content-Language"] = ctx.locale
    if ctx is not None and ctx.logged:
        return response
    elapsed = ctx.elapsed_ms(time.perf_counter()) if ctx is not None else 0
    site.logger.info(
        "%s : HTTP %s %s %s %sms",
        site.log_prefix,
        request.method,
        request_url(),
        response.status_code,
        elapsed,
    )
    return response


@bp.app_context_processor
def inject_site_globals() -> dict:
    site = current_site()
    ctx = current_request()
    locale = ctx.locale if ctx is not None else None

    def translate(phrase: str, **kwargs: Any) -> str:
        if site.localizer is None or locale is None:
            return phrase.format(**kwargs) if kwargs else phrase
        return site.localizer.translate(locale, phrase, **kwargs)

    return {
        "title": site.options.site_name,
        "root_url": site.options.root_url,
        "locale": locale,
        "locales": site.options.locales,
        "__": translate,
        "_": translate,
    }


@bp.get("/")
def index() -> Any:
    site = current_site()
    manifest = read_manifest(site.options.public_path)
    summary = summarize(manifest)

    representation = current_request().representation
    if representation is Representation.HTML:
        return render_view("index", root_url=site.options.root_url, bookJson=manifest)
    if representation is Representation.JSON:
        return jsonify({"bookJson": summary})
    return text_response(json.dumps(summary, indent="\t", ensure_ascii=False))


@bp.get("/pdf/<release>/<lang>")
def download_pdf(release: str, lang: str) -> Response:
    site = current_site()
    match = find_pdf(site.options.pdf_path, release, lang)
    if match is None:
        raise NotFound()
    site.logger.debug("%s : PDF %s/%s -> %s", site.log_prefix, release, lang, match)
    return send_file(
        match,
        mimetype="application/pdf",
        as_attachment=True,
        download_name=match.name,
    )


@bp.get("/favicon.ico")
def favicon() -> Response:
    site = current_site()
    icon = site.options.favicon
    if icon is None or not icon.is_file():
        raise NotFound()
    return send_file(icon, mimetype="image/x-icon", max_age=FAVICON_MAX_AGE)


@bp.get("/<path:filename>")
def public_file(filename: str) -> Response:
    """Serve a file of the public directory; directories resolve to ``index.html``."""
    public = str(current_site().options.public_path)
    target = safe_join(public, filename)
    if target is None:
        raise NotFound()
    if os.path.isdir(target):
        if not request.path.endswith("/"):
            return redirect(request.path + "/", code=301)
        filename = posixpath.join(filename, "index.html")
    return send_from_directory(public, filename)


__all__ = ["bp", "render_view", "request_url", "text_response"]
