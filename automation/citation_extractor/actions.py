"""Copy and share actions for a formatted citation."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pyperclip
from caseconverter import snakecase

from .errors import CitationError
from .models import CitationStyle

LOGGER = logging.getLogger(__name__)

_FALLBACK_NAME = "citation"


def copy_citation(citation: str) -> None:
    """Put *citation* on the system clipboard."""
    try:
        pyperclip.copy(citation)
    except pyperclip.PyperclipException as exc:
        raise CitationError(f"Clipboard unavailable: {exc}") from exc


def to_snake_name(title: str) -> str:
    """Convert a title to a snake_case filename-safe string."""
    if not title:
        return ""
    cleaned = re.sub(r"\s+", " ", title).strip()
    cleaned = re.sub(r"[^\w\s-]", "", cleaned)
    return snakecase(cleaned)


def export_citation(
    citation: str,
    title: str,
    style: CitationStyle,
    directory: str | Path,
) -> Path:
    """Write *citation* to ``<directory>/<snake_title>_<style>.txt``."""
    out_dir = Path(directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = to_snake_name(title)[:80] or _FALLBACK_NAME
    dest = out_dir / f"{stem}_{style.value.lower()}.txt"
    dest.write_text(citation + "\n", encoding="utf-8")
    LOGGER.info("Exported %s citation to %s", style.value, dest)
    return dest
