"""Render ``Metadata`` as a citation string in one of five styles.

The templates, including the placeholder tokens (``n.d.``, ``Publisher``,
``?``), are kept byte-for-byte compatible with citations produced by the
browser extension and web app.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from .models import (
    UNKNOWN_AUTHOR,
    UNTITLED,
    BookDetails,
    CitationStyle,
    InputKind,
    Metadata,
    PaperDetails,
    VideoDetails,
)

NO_DATE = "n.d."
_PUBLISHER_PLACEHOLDER = "Publisher"
_MISSING_PART = "?"
_SITE_PLACEHOLDER = "Website"


def format_access_date(value: datetime) -> str:
    """``October 18, 2026`` style long date."""
    return f"{value:%B} {value.day}, {value.year}"


class _Fields:
    """Resolved values shared by every template."""

    __slots__ = ("author", "year", "title", "site", "url", "accessed", "details")

    def __init__(self, metadata: Metadata) -> None:
        self.author = metadata.author or UNKNOWN_AUTHOR
        self.year = metadata.year or NO_DATE
        self.title = metadata.title or UNTITLED
        self.site = metadata.site_name or _SITE_PLACEHOLDER
        self.url = metadata.url
        self.accessed = format_access_date(metadata.access_date)
        self.details = metadata.details

    @property
    def publisher(self) -> str:
        d = self.details
        if isinstance(d, (BookDetails, PaperDetails)) and d.publisher:
            return d.publisher
        return _PUBLISHER_PLACEHOLDER

    @property
    def paper(self) -> PaperDetails:
        return self.details if isinstance(self.details, PaperDetails) else PaperDetails()

    @property
    def channel(self) -> str:
        d = self.details
        if isinstance(d, VideoDetails) and d.channel_title:
            return d.channel_title
        return self.author


# ── Per-style templates ──────────────────────────────────────


def _apa(f: _Fields, kind: InputKind) -> str:
    if kind is InputKind.ISBN:
        return f"{f.author}. ({f.year}). {f.title}. {f.publisher}."
    if kind is InputKind.DOI:
        p = f.paper
        journal = f" {p.journal}" if p.journal else ""
        vol = f", {p.volume}" if p.volume else ""
        iss = f"({p.issue})" if p.issue else ""
        doi = f" https://doi.org/{p.doi}" if p.doi else ""
        return f"{f.author}. ({f.year}). {f.title}.{journal}{vol}{iss}.{doi}"
    if kind is InputKind.YOUTUBE:
        return f"{f.channel}. ({f.year}). {f.title} [Video]. YouTube. {f.url}"
    return f"{f.author}. ({f.year}). {f.title}. {f.site}. Retrieved {f.accessed}, from {f.url}"


def _mla(f: _Fields, kind: InputKind) -> str:
    if kind is InputKind.ISBN:
        return f"{f.author}. {f.title}. {f.publisher}, {f.year}."
    if kind is InputKind.DOI:
        p = f.paper
        return (
            f'{f.author}. "{f.title}." {p.journal or ""}, '
            f"vol. {p.volume or _MISSING_PART}, no. {p.issue or _MISSING_PART}, {f.year}."
        )
    return f'"{f.title}." {f.site}, {f.year}, {f.url}. Accessed {f.accessed}.'


def _chicago(f: _Fields, kind: InputKind) -> str:
    if kind is InputKind.ISBN:
        return f"{f.author}. {f.title}. {f.publisher}, {f.year}."
    return f'{f.author}. "{f.title}." {f.site}. {f.year}. {f.url}.'


def _harvard(f: _Fields, kind: InputKind) -> str:
    return f"{f.author} ({f.year}) '{f.title}', {f.site}. Available at: {f.url} (Accessed: {f.accessed})."


def _ieee(f: _Fields, kind: InputKind) -> str:
    return (
        f'{f.author}, "{f.title}," {f.site}, {f.year}. [Online]. '
        f"Available: {f.url}. [Accessed: {f.accessed}]."
    )


_TEMPLATES: dict[CitationStyle, Callable[[_Fields, InputKind], str]] = {
    CitationStyle.APA: _apa,
    CitationStyle.MLA: _mla,
    CitationStyle.CHICAGO: _chicago,
    CitationStyle.HARVARD: _harvard,
    CitationStyle.IEEE: _ieee,
}


def format_citation(
    metadata: Metadata,
    style: CitationStyle | str,
    kind: InputKind,
) -> str:
    """Format *metadata* in *style*; *kind* is the detected input kind."""
    return _TEMPLATES[CitationStyle.parse(style)](_Fields(metadata), kind)


def format_all(metadata: Metadata, kind: InputKind) -> dict[CitationStyle, str]:
    fields = _Fields(metadata)
    return {style: render(fields, kind) for style, render in _TEMPLATES.items()}
