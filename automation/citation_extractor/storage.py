"""The saved-citation library: one JSON document of ``SavedCitation`` records.

A missing file reads as an empty library.  A file that is too large or no
longer parses raises ``LibraryError`` rather than being overwritten, so the
user can repair it.  Saves replace the file atomically.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .config import DEFAULT_LIBRARY_PATH
from .errors import LibraryError
from .models import CitationLibrary, SavedCitation

LOGGER = logging.getLogger(__name__)

MAX_LIBRARY_BYTES = 20 * 1024 * 1024


def resolve_path(path: str | Path | None = None) -> Path:
    p = Path(path) if path else DEFAULT_LIBRARY_PATH
    return p.expanduser().resolve()


def load(path: str | Path | None = None) -> CitationLibrary:
    p = resolve_path(path)
    if not p.exists():
        return CitationLibrary()

    size = p.stat().st_size
    if size > MAX_LIBRARY_BYTES:
        raise LibraryError(
            f"{p.name} is {size / 1024 / 1024:.1f} MB; "
            f"libraries over {MAX_LIBRARY_BYTES // (1024 * 1024)} MB are not loaded"
        )
    try:
        return CitationLibrary.model_validate_json(p.read_bytes())
    except ValidationError as exc:
        LOGGER.warning("Unreadable citation library %s: %s", p, exc)
        raise LibraryError(f"{p.name} is not a valid citation library") from exc


def save(library: CitationLibrary, path: str | Path | None = None) -> Path:
    """Write *library* next to *path* under a temp name, then swap it in."""
    p = resolve_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = library.model_dump_json(indent=2, exclude_none=True) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=p.parent, prefix=".citations_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_name, p)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return p


def add_citation(saved: SavedCitation, path: str | Path | None = None) -> bool:
    """Append *saved* unless its URL is already in the library.

    Returns True when the library was written.
    """
    library = load(path)
    if saved.url and library.has_url(saved.url):
        LOGGER.info("Skipping duplicate citation for %s", saved.url)
        return False
    library.citations.append(saved)
    written = save(library, path)
    LOGGER.info("Saved citation %s (%d in library) to %s", saved.id, len(library.citations), written)
    return True
