"""Metadata providers for DOIs, ISBNs and YouTube videos.

Each provider is ``async (value, client) -> Metadata`` and raises
``LookupFailed`` (or a subclass) when the registry has nothing for *value*.
All endpoints are public and need no key.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from .errors import LookupFailed, MalformedResponse
from .fetch import INVALID_RESPONSE, as_dict, as_list, fetch_json
from .models import (
    UNKNOWN_AUTHOR,
    UNTITLED,
    BookDetails,
    Metadata,
    PaperDetails,
    VideoDetails,
)

LOGGER = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────

CROSSREF_WORKS_URL = "https://api.crossref.org/works/"
OPEN_LIBRARY_BOOKS_URL = "https://openlibrary.org/api/books"
NOEMBED_URL = "https://noembed.com/embed"

DOI_NOT_FOUND = "DOI not found"
ISBN_NOT_FOUND = "ISBN not found"
VIDEO_NOT_FOUND = "YouTube video not found"

_YEAR_RE = re.compile(r"\d{4}")

# Crossref exposes several date blocks; the first present one wins.
_CROSSREF_DATE_KEYS = ("published", "published-print", "published-online", "issued")


def _first(value: Any) -> Any:
    """Crossref wraps most scalars in single-element lists."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _join_authors(authors: list[str]) -> str:
    return ", ".join(authors) or UNKNOWN_AUTHOR


# ── DOI (Crossref) ───────────────────────────────────────────


def _crossref_year(work: dict[str, Any]) -> str | None:
    for key in _CROSSREF_DATE_KEYS:
        block = work.get(key)
        if not isinstance(block, dict):
            continue
        parts = _first(as_list(block.get("date-parts")))
        if isinstance(parts, list) and parts and parts[0]:
            return str(parts[0])
    return None


def _crossref_authors(work: dict[str, Any]) -> list[str]:
    authors = []
    for a in as_list(work.get("author")):
        if not isinstance(a, dict):
            continue
        name = f"{a.get('given') or ''} {a.get('family') or ''}".strip()
        if name:
            authors.append(name)
    return authors


def crossref_work_to_metadata(work: dict[str, Any], doi: str) -> Metadata:
    """Map one Crossref ``message`` object onto ``Metadata``."""
    authors = _crossref_authors(work)
    year = _crossref_year(work)
    journal = _as_str(_first(work.get("container-title")))
    publisher = _as_str(work.get("publisher"))
    return Metadata(
        title=_as_str(_first(work.get("title"))) or UNTITLED,
        author=_join_authors(authors),
        authors=authors,
        publish_date=f"{year}-01-01" if year else "",
        publish_year=year,
        site_name=journal or publisher or "Academic Publication",
        url=f"https://doi.org/{doi}",
        details=PaperDetails(
            doi=doi,
            journal=journal,
            volume=_as_str(work.get("volume")),
            issue=_as_str(work.get("issue")),
            publisher=publisher,
        ),
    )


async def lookup_doi(doi: str, client: httpx.AsyncClient) -> Metadata:
    LOGGER.debug("Crossref lookup for %s", doi)
    data = await fetch_json(
        client, CROSSREF_WORKS_URL + quote(doi, safe=""), not_found=DOI_NOT_FOUND,
    )
    if not isinstance(data, dict):
        raise MalformedResponse(INVALID_RESPONSE)
    work = data.get("message")
    if not isinstance(work, dict) or not work:
        raise LookupFailed(DOI_NOT_FOUND)
    return crossref_work_to_metadata(work, doi)


# ── ISBN (Open Library) ──────────────────────────────────────


def open_library_book_to_metadata(book: dict[str, Any], isbn: str) -> Metadata:
    authors = [
        name for name in (
            _as_str(as_dict(a).get("name")) for a in as_list(book.get("authors"))
        )
        if name
    ]
    m = _YEAR_RE.search(str(book.get("publish_date") or ""))
    year = m.group(0) if m else None
    publisher = _as_str(as_dict(_first(as_list(book.get("publishers")))).get("name"))
    return Metadata(
        title=_as_str(book.get("title")) or UNTITLED,
        author=_join_authors(authors),
        authors=authors,
        publish_date=f"{year}-01-01" if year else "",
        publish_year=year,
        site_name=publisher or "Publisher",
        url=_as_str(book.get("url")) or f"https://openlibrary.org/isbn/{isbn}",
        details=BookDetails(publisher=publisher, isbn=isbn),
    )


async def lookup_isbn(isbn: str, client: httpx.AsyncClient) -> Metadata:
    LOGGER.debug("Open Library lookup for ISBN %s", isbn)
    key = f"ISBN:{isbn}"
    data = await fetch_json(
        client,
        OPEN_LIBRARY_BOOKS_URL,
        params={"bibkeys": key, "format": "json", "jscmd": "data"},
        not_found=ISBN_NOT_FOUND,
    )
    if not isinstance(data, dict):
        raise MalformedResponse(INVALID_RESPONSE)
    book = data.get(key)
    if not isinstance(book, dict):
        raise LookupFailed(ISBN_NOT_FOUND)
    return open_library_book_to_metadata(book, isbn)


# ── YouTube (noembed oEmbed proxy) ───────────────────────────


def youtube_watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


async def lookup_youtube(video_id: str, client: httpx.AsyncClient) -> Metadata:
    url = youtube_watch_url(video_id)
    LOGGER.debug("noembed lookup for %s", url)
    data = await fetch_json(
        client, NOEMBED_URL, params={"url": url}, not_found=VIDEO_NOT_FOUND,
    )
    if not isinstance(data, dict):
        raise MalformedResponse(INVALID_RESPONSE)
    if data.get("error"):
        raise LookupFailed(VIDEO_NOT_FOUND)
    channel = _as_str(data.get("author_name"))
    return Metadata(
        title=_as_str(data.get("title")) or "Untitled Video",
        author=channel or "Unknown Channel",
        site_name="YouTube",
        url=url,
        details=VideoDetails(channel_title=channel),
    )
