"""Process lifecycle of a book site: configuration, logger, listener."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from flask import Flask
from werkzeug.serving import BaseWSGIServer, make_server

from . import create_app, log_prefix, new_site_id
from .config import DEFAULT_SITE_NAME, ServerOptions, load_options
from .logger import close_logger, create_logger
from .services.diagnostics import MemoryDiagnostics


class BookSite:
    """One independently startable and stoppable site instance.

    ``start()`` resolves the settings, then binds a threaded WSGI server
    and returns once it listens.  ``stop()`` closes the listener, waits for
    the serving thread and stops the diagnostics; only the first call does
    the work.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        config_file: Union[str, Path, None] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._overrides = dict(overrides or {})
        self._config_file = config_file
        self._environ = environ
        self._id = new_site_id()
        self._lock = threading.Lock()
        self._started = False
        self._stopping = False
        self._stopped = threading.Event()
        self.options: Optional[ServerOptions] = None
        self.logger: Optional[logging.Logger] = None
        self.app: Optional[Flask] = None
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None
        self._diagnostics: Optional[MemoryDiagnostics] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        if self.options is not None:
            return self.options.site_name
        return str(self._overrides.get("gitbookSiteName") or DEFAULT_SITE_NAME)

    @property
    def port(self) -> Optional[int]:
        if self._server is not None:
            return self._server.server_port
        return None

    @property
    def prefix(self) -> str:
        return log_prefix(self.name, self._id)

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> "BookSite":
        """Bind the listener; settings errors propagate and nothing is bound."""
        with self._lock:
            if self._started:
                return self
            options = load_options(self._overrides, config_file=self._config_file, environ=self._environ)
            logger = create_logger(self._id, options.logger, console_name=f"{options.site_name}-console")
            self.options = options
            self.logger = logger
            if options.mem_debug:
                self._diagnostics = MemoryDiagnostics(logger, self.prefix, options.mem_debug_interval).start()

            self.app = create_app(options, logger=logger, site_id=self._id)
            try:
                self._server = make_server(options.host, options.port, self.app, threaded=True)
            except OSError:
                logger.exception("%s : cannot bind %s:%s", self.prefix, options.host, options.port)
                self._teardown()
                raise
            self._thread = threading.Thread(
                target=self._server.serve_forever,
                name=f"booksite-{self._id}",
                daemon=True,
            )
            self._thread.start()
            self._started = True
            logger.info("%s : started on port %s", self.prefix, self.port)
        return self

    def stop(self, timeout: Optional[float] = 10.0) -> bool:
        """Shut the listener down.  Returns ``False`` when already stopping."""
        # handlers are closed by the first completed stop
        if self.logger is not None and self.logger.handlers:
            self.logger.warning("%s : received stop command", self.prefix)
        with self._lock:
            if self._stopping or not self._started:
                return False
            self._stopping = True
        if self._diagnostics is not None:
            self._diagnostics.stop()
        server, thread = self._server, self._thread
        if server is not None:
            server.shutdown()
            if thread is not None:
                thread.join(timeout)
            server.server_close()
        if self.logger is not None:
            self.logger.warning("%s : exiting now.", self.prefix)
        self._teardown()
        self._stopped.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until :meth:`stop` completed."""
        return self._stopped.wait(timeout)

    def _teardown(self) -> None:
        if self._diagnostics is not None:
            self._diagnostics.stop()
            self._diagnostics = None
        if self.logger is not None:
            close_logger(self.logger)


def create(overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> BookSite:
    return BookSite(overrides, **kwargs)


__all__ = ["BookSite", "create"]
