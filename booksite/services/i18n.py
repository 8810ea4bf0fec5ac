"""Locale selection and phrase lookup backed by JSON catalogues.

One file per locale lives in the locales directory (``en.json``,
``it.json``...), each a flat mapping from phrase to translation.  The locale
of a request comes from a query parameter (``lang`` by default), then from
``Accept-Language``, then falls back to the first configured locale.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from werkzeug.datastructures import LanguageAccept

LOGGER = logging.getLogger(__name__)


def load_catalogue(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        LOGGER.warning("[i18n] unable to read %s (%s)", path, exc)
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("[i18n] %s is not a JSON object, ignored", path)
        return {}
    return {str(key): str(value) for key, value in data.items()}


class Localizer:
    """Immutable set of catalogues for the configured locales."""

    def __init__(
        self,
        locales: Iterable[str],
        directory: Union[str, Path],
        query_parameter: str = "lang",
    ) -> None:
        self.locales: Tuple[str, ...] = tuple(locales)
        if not self.locales:
            raise ValueError("at least one locale is required")
        self.directory = Path(directory)
        self.query_parameter = query_parameter
        self._catalogues: Mapping[str, Mapping[str, str]] = {
            code: load_catalogue(self.directory / f"{code}.json") for code in self.locales
        }

    @property
    def default_locale(self) -> str:
        return self.locales[0]

    def select(self, args: Mapping[str, Any], accept_languages: Optional[LanguageAccept] = None) -> str:
        """Pick the locale for a request from its query ``args`` and ``Accept-Language``."""
        requested = args.get(self.query_parameter)
        if requested and requested in self.locales:
            return requested
        if accept_languages is not None:
            match = self.match_language(accept_languages)
            if match:
                return match
        return self.default_locale

    def match_language(self, accept_languages: LanguageAccept) -> Optional[str]:
        """First configured locale matching ``Accept-Language`` in quality order.

        A tag matches a locale exactly or through its primary subtag, so
        ``it-IT`` selects ``it``.
        """
        known = {code.lower().replace("_", "-"): code for code in self.locales}
        for tag, quality in accept_languages:
            if quality <= 0 or tag == "*":
                continue
            tag = tag.lower().replace("_", "-")
            match = known.get(tag) or known.get(tag.split("-")[0])
            if match:
                return match
        return None

    def translate(self, locale: str, phrase: str, **kwargs: Any) -> str:
        catalogue = self._catalogues.get(locale) or {}
        text = catalogue.get(phrase, phrase)
        if kwargs:
            try:
                return text.format(**kwargs)
            except (KeyError, IndexError, ValueError):
                LOGGER.debug("[i18n] cannot format %r for %s", phrase, locale)
        return text

    def catalogue(self, locale: str) -> Mapping[str, str]:
        return dict(self._catalogues.get(locale) or {})


__all__ = ["Localizer", "load_catalogue"]
