"""Per-instance logger wiring.

Each site gets its own named logger so two instances in one process never
share handlers.  A console handler is always installed first; the
transports listed in the configuration are appended after it.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from typing import Any, Mapping

from .config import LOG_LEVELS, LoggerConfig, TransportConfig
from .exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _handler_level(options: Mapping[str, Any], default: int) -> int:
    level = options.get("level")
    if level is None:
        return default
    try:
        return LOG_LEVELS[str(level).lower()]
    except KeyError as exc:
        raise ConfigurationError(f"unknown transport level: {level!r}") from exc


def build_handler(transport: TransportConfig, default_level: int) -> logging.Handler:
    options = dict(transport.options)
    if transport.type == "Console":
        stream = sys.stderr if options.get("stderr", True) else sys.stdout
        handler: logging.Handler = logging.StreamHandler(stream)
    elif transport.type == "File":
        if not options.get("filename"):
            raise ConfigurationError("File transport requires a 'filename'")
        handler = logging.FileHandler(options["filename"], encoding="utf-8")
    elif transport.type == "RotatingFile":
        if not options.get("filename"):
            raise ConfigurationError("RotatingFile transport requires a 'filename'")
        handler = logging.handlers.RotatingFileHandler(
            options["filename"],
            maxBytes=int(options.get("maxsize", 10 * 1024 * 1024)),
            backupCount=int(options.get("maxFiles", 5)),
            encoding="utf-8",
        )
    else:  # pragma: no cover - rejected by the configuration layer
        raise ConfigurationError(f"unknown logger transport: {transport.type}")
    handler.setLevel(_handler_level(options, default_level))
    handler.setFormatter(logging.Formatter(options.get("format") or LOG_FORMAT))
    if options.get("name"):
        handler.set_name(str(options["name"]))
    return handler


def create_logger(name: str, config: LoggerConfig, *, console_name: str = "console") -> logging.Logger:
    """Return a configured, non-propagating logger called ``booksite.<name>``.

    Handlers from a previous call with the same name are closed and replaced.
    """
    logger = logging.getLogger(f"booksite.{name}")
    close_logger(logger)
    logger.setLevel(config.levelno)
    logger.propagate = False

    console = TransportConfig(type="Console", options={"name": console_name, "level": config.level})
    for transport in (console, *config.transports):
        logger.addHandler(build_handler(transport, config.levelno))
    return logger


def close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


__all__ = ["LOG_FORMAT", "build_handler", "close_logger", "create_logger"]
