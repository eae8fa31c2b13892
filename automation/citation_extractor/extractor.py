"""Tie classification, lookup and formatting together.

``extract`` is the stateless entry point: one raw string in, one
``Extraction`` out, ``CitationError`` on failure.  ``CitationSession``
wraps it with the state a UI needs (selected style, last result, last
error) and the copy / share / save actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Awaitable, Callable

import httpx
from . import actions, storage
from .classifier import classify, ensure_scheme
from .errors import CitationError, InputValidationError, LookupFailed, MalformedResponse
from .fetch import INVALID_RESPONSE, PAYLOAD_ERRORS
from .formatter import format_all, format_citation
from .models import CitationStyle, DetectedInput, InputKind, Metadata, SavedCitation
from .providers import lookup_doi, lookup_isbn, lookup_youtube
from .publishers import lookup_url

LOGGER = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please enter a URL, DOI, ISBN, or YouTube link"
UNKNOWN_INPUT_MESSAGE = (
    "Could not determine input type. Enter a valid URL, DOI, ISBN, or YouTube link."
)

Provider = Callable[[str, httpx.AsyncClient], Awaitable[Metadata]]

PROVIDERS: dict[InputKind, Provider] = {
    InputKind.DOI: lookup_doi,
    InputKind.ISBN: lookup_isbn,
    InputKind.YOUTUBE: lookup_youtube,
    InputKind.URL: lookup_url,
}


@dataclass(frozen=True)
class Extraction:
    detected: DetectedInput
    metadata: Metadata

    def format(self, style: CitationStyle | str = CitationStyle.APA) -> str:
        return format_citation(self.metadata, style, self.detected.kind)


def resolve_input(raw: str) -> DetectedInput:
    """Classify *raw* and pick the kind a provider exists for.

    Raises ``InputValidationError`` for blank input and ``LookupFailed``
    when nothing can handle it.
    """
    text = raw.strip()
    if not text:
        raise InputValidationError(EMPTY_INPUT_MESSAGE)
    detected = classify(text)
    if detected.kind is InputKind.UNKNOWN:
        # Dotted strings are still looked up as URLs.
        if "." not in text:
            raise LookupFailed(UNKNOWN_INPUT_MESSAGE)
        detected = DetectedInput(kind=InputKind.URL, value=ensure_scheme(text))
    return detected


async def lookup(detected: DetectedInput, client: httpx.AsyncClient) -> Metadata:
    provider = PROVIDERS[detected.kind]
    LOGGER.debug("Looking up %s %r", detected.kind.value, detected.value)
    try:
        return await provider(detected.value, client)
    except PAYLOAD_ERRORS as exc:
        # Valid JSON in a shape the provider mapping did not expect.
        LOGGER.debug("Unusable %s payload: %s", detected.kind.value, exc)
        raise MalformedResponse(INVALID_RESPONSE) from exc


async def extract(raw: str, client: httpx.AsyncClient) -> Extraction:
    detected = resolve_input(raw)
    metadata = await lookup(detected, client)
    return Extraction(detected=detected, metadata=metadata)


# ── Session state machine ────────────────────────────────────


class SessionState(StrEnum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


class CitationSession:
    """One extractor screen's worth of state.

    Only the most recent ``extract`` call may update the session: each call
    takes a generation number, and a lookup that finishes after a newer call
    (or a ``reset``) has started is discarded.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        style: CitationStyle | str = CitationStyle.APA,
    ) -> None:
        self._client = client
        self._generation = 0
        self.style = CitationStyle.parse(style)
        self.state = SessionState.IDLE
        self.raw_input = ""
        self.detected: DetectedInput | None = None
        self.metadata: Metadata | None = None
        self.error: str | None = None

    # ── extraction ───────────────────────────────────────────

    async def extract(self, raw: str) -> str | None:
        """Run one extraction.  Returns the citation, or None on failure.

        Blank input raises ``InputValidationError`` and leaves the session
        untouched.
        """
        if not raw.strip():
            raise InputValidationError(EMPTY_INPUT_MESSAGE)

        self._generation += 1
        ticket = self._generation
        self.raw_input = raw
        self.detected = None
        self.metadata = None
        self.error = None
        self.state = SessionState.CLASSIFYING

        try:
            detected = resolve_input(raw)
            self.detected = detected
            self.state = SessionState.EXTRACTING
            metadata = await lookup(detected, self._client)
        except LookupFailed as exc:
            if ticket == self._generation:
                self._fail(str(exc))
            return None

        if ticket != self._generation:
            LOGGER.debug("Discarding superseded result for %r", raw)
            return None

        self.state = SessionState.FORMATTING
        self.metadata = metadata
        citation = format_citation(metadata, self.style, detected.kind)
        self.state = SessionState.DONE
        LOGGER.info("Extracted %s citation for %r", detected.kind.value, raw.strip())
        return citation

    def _fail(self, message: str) -> None:
        LOGGER.warning("Extraction failed: %s", message)
        self.error = message or "Failed to extract citation"
        self.state = SessionState.FAILED

    # ── style / reset ────────────────────────────────────────

    @property
    def citation(self) -> str:
        """The current citation in the selected style, or ``""``."""
        if self.state is not SessionState.DONE or not self.metadata or not self.detected:
            return ""
        return format_citation(self.metadata, self.style, self.detected.kind)

    def select_style(self, style: CitationStyle | str) -> str:
        self.style = CitationStyle.parse(style)
        return self.citation

    def reset(self) -> None:
        self._generation += 1
        self.state = SessionState.IDLE
        self.raw_input = ""
        self.detected = None
        self.metadata = None
        self.error = None

    # ── actions on the finished citation ─────────────────────

    def _require_done(self, what: str) -> tuple[Metadata, DetectedInput]:
        if self.state is not SessionState.DONE or not self.metadata or not self.detected:
            raise CitationError(f"No citation to {what}")
        return self.metadata, self.detected

    def copy(self) -> str:
        self._require_done("copy")
        citation = self.citation
        actions.copy_citation(citation)
        return citation

    def share(self, directory: str | Path) -> Path:
        metadata, _ = self._require_done("share")
        return actions.export_citation(self.citation, metadata.title, self.style, directory)

    def save(self, library_path: str | Path | None = None) -> SavedCitation | None:
        """Add the citation to the library.  Returns None for a duplicate URL."""
        metadata, detected = self._require_done("save")
        saved = SavedCitation.from_metadata(
            metadata, detected.kind, format_all(metadata, detected.kind),
        )
        return saved if storage.add_citation(saved, library_path) else None
