"""Blueprint registrations for the Flask application."""
from __future__ import annotations

from typing import Iterable, List

from flask import Blueprint

from .errors import bp as errors_bp
from .site import bp as site_bp


def get_blueprints() -> List[Blueprint]:
    """Return the list of blueprints to register on the Flask app."""

    return [site_bp, errors_bp]


__all__: Iterable[str] = ["get_blueprints"]
