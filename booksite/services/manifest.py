"""Reading of the ``book.json`` manifest published next to the static site."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from ..exceptions import ManifestError

MANIFEST_FILENAME = "book.json"
VERSIONS_PATH = ("pluginsConfig", "versions", "options")


def manifest_path(public_path: Union[str, Path]) -> Path:
    return Path(public_path) / MANIFEST_FILENAME


def read_manifest(public_path: Union[str, Path]) -> Any:
    """Load and parse ``<public_path>/book.json``.

    The file is read again on every call.  Any I/O or decoding problem is
    reported as :class:`ManifestError`.
    """
    path = manifest_path(public_path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise ManifestError(f"{MANIFEST_FILENAME} not found") from exc
    except OSError as exc:
        raise ManifestError(f"cannot read {MANIFEST_FILENAME}: {exc.strerror or exc}") from exc
    except ValueError as exc:
        raise ManifestError(f"invalid {MANIFEST_FILENAME}: {exc}") from exc


def summarize(manifest: Any) -> Any:
    """Return ``manifest["pluginsConfig"]["versions"]["options"]``."""
    node = manifest
    walked = []
    for key in VERSIONS_PATH:
        walked.append(key)
        if not isinstance(node, dict) or key not in node:
            raise ManifestError(f"{MANIFEST_FILENAME} has no '{'.'.join(walked)}' entry")
        node = node[key]
    return node


def summary_payload(manifest: Any) -> Dict[str, Any]:
    return {"bookJson": summarize(manifest)}


__all__ = ["MANIFEST_FILENAME", "manifest_path", "read_manifest", "summarize", "summary_payload"]
