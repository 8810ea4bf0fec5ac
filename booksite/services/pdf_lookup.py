"""Location of PDF exports by release and language.

The PDF tree is searched for ``**/<release>/*<lang>.pdf``: any file whose
parent directory is named exactly ``release`` (at any depth) and whose name
ends with ``<lang>.pdf``.  Hidden entries are skipped the way shell globbing
skips them, symbolic links to directories are not followed and a match must
resolve inside the PDF root.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from ..exceptions import PdfSearchError

LOGGER = logging.getLogger(__name__)

PDF_SUFFIX = ".pdf"
_FORBIDDEN = ("/", "\\", "\x00")


def is_safe_segment(value: str) -> bool:
    """Return ``True`` when ``value`` can be used as a single path component."""
    if not value or value in {".", ".."}:
        return False
    return not any(token in value for token in _FORBIDDEN)


def _raise_search_error(exc: OSError) -> None:
    raise PdfSearchError(f"PDF search failed: {exc.strerror or exc}") from exc


def _is_inside(candidate: Path, root: Path) -> bool:
    try:
        candidate.resolve().relative_to(root)
    except (OSError, ValueError):
        return False
    return True


def iter_candidates(root: Path, release: str, lang: str) -> List[PurePosixPath]:
    """Return every root-relative path matching ``**/<release>/*<lang>.pdf``."""
    suffix = f"{lang}{PDF_SUFFIX}"
    matches: List[PurePosixPath] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_search_error):
        dirnames[:] = [name for name in dirnames if not name.startswith(".") or name == release]
        current = Path(dirpath)
        if current == root or current.name != release:
            continue
        for filename in filenames:
            if filename.startswith(".") or not filename.endswith(suffix):
                continue
            matches.append(PurePosixPath(current.relative_to(root).as_posix()) / filename)
    return matches


def find_pdf(pdf_root: Union[str, Path, None], release: str, lang: str) -> Optional[Path]:
    """Return the PDF for ``release``/``lang`` or ``None`` when nothing matches.

    Several matches are ordered by their root-relative POSIX path and the
    smallest one wins, so the answer does not depend on directory
    enumeration order.  Raises :class:`PdfSearchError` when the tree cannot
    be walked.
    """
    if not pdf_root:
        return None
    if not (is_safe_segment(release) and is_safe_segment(lang)):
        LOGGER.debug("rejected PDF lookup release=%r lang=%r", release, lang)
        return None
    root = Path(pdf_root)
    if not root.is_dir():
        return None
    root = root.resolve()

    for relative in sorted(iter_candidates(root, release, lang)):
        candidate = root.joinpath(*relative.parts)
        if _is_inside(candidate, root) and candidate.is_file():
            return candidate
        LOGGER.warning("skipping PDF outside of %s: %s", root, relative)
    return None


__all__ = ["find_pdf", "is_safe_segment", "iter_candidates"]
