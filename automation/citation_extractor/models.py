"""Pydantic models for the citation extractor.

``Metadata`` is the normalized record every provider returns.  The fields
shared by all sources live on the record itself; the source-specific ones
(publisher, journal, channel ...) live in a ``details`` payload tagged by
``type`` so the formatter can tell a book from a paper without probing
optional attributes.
"""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

UNTITLED = "Untitled"
UNKNOWN_AUTHOR = "Unknown Author"

_YEAR_RE = re.compile(r"^\s*(\d{4})")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InputKind(StrEnum):
    """What a raw user-entered string turned out to be."""

    URL = "url"
    DOI = "doi"
    ISBN = "isbn"
    YOUTUBE = "youtube"
    UNKNOWN = "unknown"


class CitationStyle(StrEnum):
    APA = "APA"
    MLA = "MLA"
    CHICAGO = "Chicago"
    HARVARD = "Harvard"
    IEEE = "IEEE"

    @classmethod
    def parse(cls, value: str | CitationStyle) -> CitationStyle:
        """Case-insensitive lookup (``"apa"`` -> ``APA``)."""
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().casefold()
        for style in cls:
            if style.value.casefold() == wanted:
                return style
        raise ValueError(
            f"Unknown citation style '{value}' "
            f"(expected one of: {', '.join(s.value for s in cls)})"
        )


class DetectedInput(BaseModel):
    """Result of classifying one raw input string."""

    model_config = ConfigDict(frozen=True)

    kind: InputKind
    value: str


# ── Kind-specific payloads ───────────────────────────────────


class BookDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["book"] = "book"
    publisher: Optional[str] = None
    isbn: str = ""


class PaperDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["paper"] = "paper"
    doi: Optional[str] = None
    journal: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    publisher: Optional[str] = None


class VideoDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["video"] = "video"
    channel_title: Optional[str] = None


class WebDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["web"] = "web"


Details = Annotated[
    BookDetails | PaperDetails | VideoDetails | WebDetails,
    Field(discriminator="type"),
]


class Metadata(BaseModel):
    """A normalized bibliographic record.

    ``title``, ``author``, ``site_name``, ``url`` and ``access_date`` are
    always populated so formatting never has to null-check them.
    """

    model_config = ConfigDict(frozen=True)

    title: str = UNTITLED
    author: str = UNKNOWN_AUTHOR
    authors: list[str] = Field(default_factory=list)
    publish_date: str = ""
    publish_year: Optional[str] = None
    access_date: datetime = Field(default_factory=_utc_now)
    site_name: str
    url: str
    details: Details = Field(default_factory=WebDetails)

    @property
    def year(self) -> str | None:
        """``publish_year``, else the year of ``publish_date``, else None."""
        if self.publish_year:
            return self.publish_year
        m = _YEAR_RE.match(self.publish_date)
        return m.group(1) if m else None

    @property
    def source(self) -> str:
        """Journal when known, otherwise the site name."""
        if isinstance(self.details, PaperDetails) and self.details.journal:
            return self.details.journal
        return self.site_name


# ── Saved citations ──────────────────────────────────────────


class SavedCitation(BaseModel):
    """A citation the user chose to keep, rendered in every style."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: InputKind
    title: str
    authors: list[str] = Field(default_factory=list)
    year: Optional[int] = None
    url: str = ""
    doi: Optional[str] = None
    isbn: Optional[str] = None
    formatted: dict[CitationStyle, str] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def from_metadata(
        cls,
        metadata: Metadata,
        kind: InputKind,
        formatted: dict[CitationStyle, str],
    ) -> SavedCitation:
        details = metadata.details
        year = metadata.year
        return cls(
            kind=kind,
            title=metadata.title,
            authors=list(metadata.authors) or [metadata.author],
            year=int(year) if year and year.isdigit() else None,
            url=metadata.url,
            doi=details.doi if isinstance(details, PaperDetails) else None,
            isbn=details.isbn if isinstance(details, BookDetails) else None,
            formatted=dict(formatted),
        )


class CitationLibrary(BaseModel):
    """Root object persisted as JSON."""

    citations: list[SavedCitation] = Field(default_factory=list)

    # ── helpers ────────────────────────────────────────────────
    def find(self, citation_id: str) -> SavedCitation | None:
        for c in self.citations:
            if c.id == citation_id:
                return c
        return None

    def has_url(self, url: str) -> bool:
        key = url.rstrip("/").lower()
        return any(c.url.rstrip("/").lower() == key for c in self.citations)
