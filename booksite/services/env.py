"""Helpers to read environment variables.

Every helper accepts an explicit ``environ`` mapping so several site
instances with different environments can coexist in one process (tests
rely on it).  ``None`` means :data:`os.environ`.
"""

import os
from typing import Mapping, Optional


def env(name: str, default=None, environ: Optional[Mapping[str, str]] = None):
    """Return the value of ``name`` or ``default`` when unset or blank.

    :param name: environment variable name
    :param default: value returned when the variable is not defined
    :param environ: mapping to read from instead of the process environment
    """
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not str(value).strip():
        return default
    return value


def is_true(name: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Interpret an environment variable as a boolean.

    Recognised true values are '1', 'true', 'yes', 'on' (case-insensitive).
    """
    value = env(name, "", environ)
    return str(value).strip().lower() in ("1", "true", "yes", "on")
