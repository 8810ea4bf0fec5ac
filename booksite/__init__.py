"""HTTP front end for a statically generated book site.

The application serves the public directory produced by the book
generator, a manifest-driven index page at the root URL and PDF exports
looked up by release and language.  :func:`create_app` builds a configured
Flask application from an immutable :class:`~booksite.config.ServerOptions`;
:class:`~booksite.site.BookSite` adds the process lifecycle (listener,
logger, diagnostics) around it.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .blueprints import get_blueprints
from .config import ServerOptions, load_options
from .context import EXTENSION_KEY, SiteContext
from .exceptions import BookSiteError, ConfigurationError, ManifestError, PdfSearchError, UpstreamFailure
from .logger import create_logger
from .services.i18n import Localizer

__version__ = "1.0.0"


def new_site_id() -> str:
    return uuid.uuid4().hex[:10]


def log_prefix(site_name: str, site_id: str) -> str:
    return f"{site_name} | _id {site_id} pid {os.getpid()}"


def create_app(
    options: Optional[ServerOptions] = None,
    *,
    logger: Optional[logging.Logger] = None,
    site_id: Optional[str] = None,
) -> Flask:
    """Factory to create a configured Flask application.

    The application provides the following endpoints (all below
    ``options.root_url``):

    - ``GET /``: the manifest summary as HTML, JSON or text;
    - ``GET /pdf/<release>/<lang>``: the matching PDF export as a download;
    - ``GET /favicon.ico``: the configured icon, if any;
    - ``GET /<path>``: files of the public directory.

    Parameters
    ----------
    options : Optional[ServerOptions]
        Resolved settings.  ``None`` resolves them from the environment and
        the configuration file with :func:`~booksite.config.load_options`.
    logger : Optional[logging.Logger]
        Logger used for access and error lines.  A dedicated one is built
        from ``options.logger`` when omitted.
    site_id : Optional[str]
        Identifier repeated in every log line.

    Returns
    -------
    Flask
        A configured Flask application instance.
    """
    if options is None:
        options = load_options()
    site_id = site_id or new_site_id()
    if logger is None:
        logger = create_logger(site_id, options.logger, console_name=f"{options.site_name}-console")

    app = Flask(__name__, static_folder=None, template_folder=str(options.views_path))
    app.json.sort_keys = False
    app.config["ENV_MODE"] = options.env
    app.config["SITE_NAME"] = options.site_name
    if options.trust_proxy:
        hops = options.trust_proxy
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_port=hops, x_prefix=hops)

    localizer = None
    if options.locales:
        localizer = Localizer(options.locales, options.locales_path, options.locale_query_parameter)

    app.extensions[EXTENSION_KEY] = SiteContext(
        options=options,
        logger=logger,
        log_prefix=log_prefix(options.site_name, site_id),
        localizer=localizer,
    )

    for blueprint in get_blueprints():
        app.register_blueprint(blueprint, url_prefix=options.url_prefix)
    return app


__all__ = [
    "BookSiteError",
    "ConfigurationError",
    "ManifestError",
    "PdfSearchError",
    "ServerOptions",
    "UpstreamFailure",
    "create_app",
    "load_options",
]
