"""Decide what kind of identifier the user typed.

Checks run in a fixed order and the first match wins: a bare ISBN-13 is
also "digits", and a ``doi.org`` link is also a URL, so the more specific
shapes must be tried first.
"""

from __future__ import annotations

import re

from .models import DetectedInput, InputKind

_ISBN_SEPARATORS = re.compile(r"[-\s]")
_ISBN_10 = re.compile(r"^\d{10}$")
_ISBN_13 = re.compile(r"^97[89]\d{10}$")

_DOI_URL_PREFIX = re.compile(r"^https?://(dx\.)?doi\.org/", re.IGNORECASE)
_DOI_LABEL_PREFIX = re.compile(r"^doi:\s*", re.IGNORECASE)
_DOI = re.compile(r"^10\.\d{4,}/\S+$")

_YOUTUBE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"youtube\.com/watch\?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})"),
)

_KIND_LABELS: dict[InputKind, tuple[str, str]] = {
    InputKind.URL: ("\U0001f310", "Website"),
    InputKind.DOI: ("\U0001f4c4", "Academic Paper (DOI)"),
    InputKind.ISBN: ("\U0001f4da", "Book (ISBN)"),
    InputKind.YOUTUBE: ("\U0001f4fa", "YouTube Video"),
    InputKind.UNKNOWN: ("❓", "Unknown"),
}


def normalize_isbn(raw: str) -> str | None:
    """Return the bare digits of a 10- or 13-digit ISBN, or None."""
    cleaned = _ISBN_SEPARATORS.sub("", raw)
    if _ISBN_10.match(cleaned) or _ISBN_13.match(cleaned):
        return cleaned
    return None


def normalize_doi(raw: str) -> str | None:
    """Strip a ``doi.org`` / ``doi:`` prefix and return the DOI, or None."""
    doi = _DOI_URL_PREFIX.sub("", raw)
    doi = _DOI_LABEL_PREFIX.sub("", doi).strip()
    return doi if _DOI.match(doi) else None


def youtube_video_id(raw: str) -> str | None:
    for pattern in _YOUTUBE_PATTERNS:
        m = pattern.search(raw)
        if m:
            return m.group(1)
    return None


def looks_like_url(text: str) -> bool:
    # A dot anywhere is enough: "example.com/page" is accepted as a bare domain.
    return text.startswith(("http://", "https://")) or "." in text


def ensure_scheme(text: str) -> str:
    return text if text.startswith("http") else f"https://{text}"


def classify(raw: str) -> DetectedInput:
    """Classify *raw* as ISBN, DOI, YouTube, URL or unknown.

    Never raises; anything unrecognised comes back as ``UNKNOWN`` with the
    trimmed input as its value.
    """
    text = raw.strip()

    isbn = normalize_isbn(text)
    if isbn:
        return DetectedInput(kind=InputKind.ISBN, value=isbn)

    doi = normalize_doi(text)
    if doi:
        return DetectedInput(kind=InputKind.DOI, value=doi)

    video_id = youtube_video_id(text)
    if video_id:
        return DetectedInput(kind=InputKind.YOUTUBE, value=video_id)

    if looks_like_url(text):
        return DetectedInput(kind=InputKind.URL, value=ensure_scheme(text))

    return DetectedInput(kind=InputKind.UNKNOWN, value=text)


def describe_kind(kind: InputKind) -> tuple[str, str]:
    """(icon, label) pair used for the live detection badge."""
    return _KIND_LABELS[kind]
