"""Resolution of the site settings.

Settings are merged, in increasing precedence, from the built-in defaults,
an optional configuration file (YAML or JSON), the process environment and
the overrides passed by the caller.  The result is an immutable
:class:`ServerOptions` snapshot handed to every constructor that needs it;
nothing reads the configuration again after startup.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .exceptions import ConfigurationError
from .services.env import env, is_true
from .util import slugify

DEFAULT_SITE_NAME = "Book"
DEFAULT_PORT = 8080
DEFAULT_HOST = "127.0.0.1"
DEVELOPMENT = "development"

LOG_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "verbose": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

TRANSPORT_TYPES = ("Console", "File", "RotatingFile")

_CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def default_options() -> Dict[str, Any]:
    """Return a fresh copy of the built-in defaults.

    ``env`` and ``logger.level`` are left unset here: they depend on the
    environment and are resolved after the merge.
    """
    return {
        "gitbookSiteName": DEFAULT_SITE_NAME,
        "env": None,
        "port": DEFAULT_PORT,
        "host": DEFAULT_HOST,
        "public-path": "./public",
        "views-path": "./views",
        "view-engine": "html",
        "pdf-path": "./pdf",
        "root-url": "/",
        "favicon": False,
        "locales": False,
        "locales-path": "./locales",
        "locale-query-parameter": "lang",
        "trust-proxy": False,
        "memDebug": False,
        "logger": {"level": None, "transports": []},
    }


@dataclass(frozen=True)
class TransportConfig:
    """One extra logging destination (``Console``, ``File`` or ``RotatingFile``)."""

    type: str
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoggerConfig:
    level: str
    transports: Tuple[TransportConfig, ...] = ()

    @property
    def levelno(self) -> int:
        return LOG_LEVELS[self.level]


@dataclass(frozen=True)
class ServerOptions:
    """Read-only settings snapshot for one site instance."""

    site_name: str
    env: str
    port: int
    host: str
    public_path: Path
    views_path: Path
    view_engine: Optional[str]
    pdf_path: Optional[Path]
    root_url: str
    favicon: Optional[Path]
    locales: Tuple[str, ...]
    locales_path: Path
    locale_query_parameter: str
    trust_proxy: int
    mem_debug: bool
    mem_debug_interval: float
    logger: LoggerConfig
    config_file: Optional[Path] = None

    @property
    def is_development(self) -> bool:
        return self.env == DEVELOPMENT

    @property
    def url_prefix(self) -> Optional[str]:
        """Blueprint prefix derived from ``root_url`` (``None`` for ``/``)."""
        stripped = self.root_url.rstrip("/")
        return stripped or None

    @property
    def html_enabled(self) -> bool:
        return bool(self.view_engine)


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested mappings are merged key by key."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def find_config_file(site_name: str, cwd: Optional[Path] = None) -> Optional[Path]:
    """Look for ``<slug>.yaml|.yml|.json`` in ``cwd`` then ``cwd/config``."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    slug = slugify(site_name)
    for folder in (base, base / "config"):
        for suffix in _CONFIG_SUFFIXES:
            candidate = folder / f"{slug}{suffix}"
            if candidate.is_file():
                return candidate
    return None


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"cannot read configuration file {config_path}: {exc}") from exc
    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(raw) if raw.strip() else {}
        else:
            data = yaml.safe_load(raw) or {}
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot parse configuration file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {config_path} must contain a mapping")
    return data


def _environment_overrides(environ: Optional[Mapping[str, str]]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    name = env("BOOK_NAME", None, environ)
    if name:
        overrides["gitbookSiteName"] = name
    mode = env("BOOK_ENV", None, environ) or env("FLASK_ENV", None, environ)
    if mode:
        overrides["env"] = mode
    port = env("PORT", None, environ)
    if port:
        overrides["port"] = port
    host = env("HOST", None, environ)
    if host:
        overrides["host"] = host
    level = env("LOG_LEVEL", None, environ)
    if level:
        overrides["logger"] = {"level": level}
    if is_true("BOOK_MEM_DEBUG", environ):
        overrides["memDebug"] = True
    return overrides


def _as_path(value: Any, key: str, base: Path) -> Path:
    if not isinstance(value, (str, Path)) or not str(value).strip():
        raise ConfigurationError(f"'{key}' must be a path")
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()


def _optional_path(value: Any, key: str, base: Path) -> Optional[Path]:
    if value is None or value is False or value == "":
        return None
    return _as_path(value, key, base)


def _parse_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid port: {value!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"port out of range: {port}")
    return port


def _parse_locales(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = [item.strip() for item in value.split(",") if item.strip()]
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) and item for item in value):
        raise ConfigurationError("'locales' must be a list of locale codes")
    return tuple(dict.fromkeys(value))


def _parse_view_engine(value: Any) -> Optional[str]:
    if value is None or value is False:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError("'view-engine' must be a template extension or false")
    return value.strip().lstrip(".")


def _parse_trust_proxy(value: Any) -> int:
    if value is True:
        return 1
    if value is None or value is False:
        return 0
    try:
        hops = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid 'trust-proxy' value: {value!r}") from exc
    if hops < 0:
        raise ConfigurationError("'trust-proxy' cannot be negative")
    return hops


def _parse_mem_debug(value: Any) -> Tuple[bool, float]:
    interval = 60.0
    if isinstance(value, Mapping):
        try:
            interval = float(value.get("interval", interval))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("'memDebug.interval' must be a number of seconds") from exc
        if interval <= 0:
            raise ConfigurationError("'memDebug.interval' must be positive")
        return True, interval
    return bool(value), interval


def _parse_logger(value: Any, mode: str) -> LoggerConfig:
    if not isinstance(value, Mapping):
        raise ConfigurationError("'logger' must be a mapping")
    level = value.get("level") or ("debug" if mode == DEVELOPMENT else "info")
    level = str(level).lower()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"unknown log level: {level!r}")
    raw_transports = value.get("transports") or []
    if not isinstance(raw_transports, list):
        raise ConfigurationError("'logger.transports' must be a list")
    transports: List[TransportConfig] = []
    for raw in raw_transports:
        if not isinstance(raw, Mapping) or raw.get("type") not in TRANSPORT_TYPES:
            raise ConfigurationError(f"unknown logger transport: {raw!r}")
        options = raw.get("options") or {}
        if not isinstance(options, Mapping):
            raise ConfigurationError("transport 'options' must be a mapping")
        transports.append(TransportConfig(type=raw["type"], options=dict(options)))
    return LoggerConfig(level=level, transports=tuple(transports))


def build_options(raw: Mapping[str, Any], *, base_dir: Optional[Path] = None,
                  config_file: Optional[Path] = None) -> ServerOptions:
    """Validate a merged option mapping and freeze it into :class:`ServerOptions`."""

    base = Path(base_dir) if base_dir is not None else Path.cwd()
    mode = str(raw.get("env") or DEVELOPMENT)
    root_url = str(raw.get("root-url") or "/")
    if not root_url.startswith("/"):
        raise ConfigurationError("'root-url' must start with '/'")
    query_parameter = str(raw.get("locale-query-parameter") or "lang")
    mem_debug, interval = _parse_mem_debug(raw.get("memDebug"))

    return ServerOptions(
        site_name=str(raw.get("gitbookSiteName") or DEFAULT_SITE_NAME),
        env=mode,
        port=_parse_port(raw.get("port", DEFAULT_PORT)),
        host=str(raw.get("host") or DEFAULT_HOST),
        public_path=_as_path(raw.get("public-path"), "public-path", base),
        views_path=_as_path(raw.get("views-path"), "views-path", base),
        view_engine=_parse_view_engine(raw.get("view-engine")),
        pdf_path=_optional_path(raw.get("pdf-path"), "pdf-path", base),
        root_url=root_url,
        favicon=_optional_path(raw.get("favicon"), "favicon", base),
        locales=_parse_locales(raw.get("locales")),
        locales_path=_as_path(raw.get("locales-path"), "locales-path", base),
        locale_query_parameter=query_parameter,
        trust_proxy=_parse_trust_proxy(raw.get("trust-proxy")),
        mem_debug=mem_debug,
        mem_debug_interval=interval,
        logger=_parse_logger(raw.get("logger") or {}, mode),
        config_file=config_file,
    )


def load_options(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    config_file: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
    base_dir: Optional[Path] = None,
) -> ServerOptions:
    """Resolve defaults, configuration file, environment and ``overrides``.

    Raises :class:`ConfigurationError` on any malformed setting.
    """

    overrides = dict(overrides or {})
    from_env = _environment_overrides(environ)

    site_name = overrides.get("gitbookSiteName") or from_env.get("gitbookSiteName") or DEFAULT_SITE_NAME
    if config_file is None:
        config_file = env("BOOK_CONFIG", None, environ)
    if config_file is not None:
        config_path: Optional[Path] = Path(config_file)
        if not config_path.is_file():
            raise ConfigurationError(f"configuration file not found: {config_path}")
    else:
        config_path = find_config_file(str(site_name), base_dir)

    merged = default_options()
    if config_path is not None:
        merged = deep_merge(merged, read_config_file(config_path))
    merged = deep_merge(merged, from_env)
    merged = deep_merge(merged, overrides)
    return build_options(merged, base_dir=base_dir, config_file=config_path)


__all__ = [
    "LoggerConfig",
    "ServerOptions",
    "TransportConfig",
    "build_options",
    "deep_merge",
    "default_options",
    "find_config_file",
    "load_options",
    "read_config_file",
]
