"""Exceptions raised while turning user input into a citation."""

from __future__ import annotations


class CitationError(Exception):
    """Base class; ``str(exc)`` is the message shown to the user."""


class InputValidationError(CitationError):
    """The input is empty; nothing was looked up."""


class LookupFailed(CitationError):
    """A provider found no usable record for the input."""


class MalformedResponse(LookupFailed):
    """A provider answered with something that is not the JSON we expect."""


class NetworkError(LookupFailed):
    """The request never produced a response (DNS, timeout, reset ...)."""


class LibraryError(CitationError):
    """The saved-citation library file exists but cannot be used."""
