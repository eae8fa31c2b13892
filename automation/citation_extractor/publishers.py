"""URL provider: publisher-aware lookups with a generic fallback.

Publisher rules are checked in ``PUBLISHER_RULES`` order against the
hostname and path.  Only the first matching rule runs; if it comes back
empty the URL is described from its own shape.  The generic path needs no
network and never fails for a parseable URL.

Adding a publisher means adding a ``PublisherRule`` to the tuple.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable
from urllib.parse import unquote, urlsplit

import httpx

from .errors import LookupFailed
from .fetch import PAYLOAD_ERRORS, as_dict, as_list, fetch_json
from .models import UNKNOWN_AUTHOR, UNTITLED, Metadata, PaperDetails
from .providers import lookup_doi

LOGGER = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────

SEMANTIC_SCHOLAR_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/paper/search"
OPENALEX_WORKS_URL = "https://api.openalex.org/works"

_SEMANTIC_SCHOLAR_FIELDS = "title,authors,year,venue,externalIds"
_OPENALEX_FILTER = "institutions.country_code:US"

_SEPARATORS = re.compile(r"[-_]")
_EXTENSION = re.compile(r"\.\w+$")

UNTITLED_PAGE = "Untitled Page"

Attempt = Callable[[str, str, httpx.AsyncClient], Awaitable["Metadata | None"]]


@dataclass(frozen=True)
class PublisherRule:
    """One publisher-specific strategy.

    *attempt* receives the captured path fragment, the original URL and the
    HTTP client, and returns ``None`` when it could not produce a record.
    """

    name: str
    host_marker: str
    path_pattern: re.Pattern[str]
    attempt: Attempt

    def match(self, hostname: str, path: str) -> str | None:
        if self.host_marker not in hostname:
            return None
        m = self.path_pattern.search(path)
        return m.group(1) if m else None


# ── IEEE: two academic search indexes, in order ──────────────


def _semantic_scholar_paper_to_metadata(paper: dict[str, Any], url: str) -> Metadata:
    authors = [
        name for name in (as_dict(a).get("name") for a in as_list(paper.get("authors")))
        if name
    ]
    year = paper.get("year")
    venue = paper.get("venue") or None
    return Metadata(
        title=paper.get("title") or UNTITLED,
        author=", ".join(authors) or UNKNOWN_AUTHOR,
        authors=authors,
        publish_date=f"{year}-01-01" if year else "",
        publish_year=str(year) if year else None,
        site_name=venue or "IEEE",
        url=url,
        details=PaperDetails(doi=as_dict(paper.get("externalIds")).get("DOI"), journal=venue),
    )


async def search_semantic_scholar(
    doc_id: str, url: str, client: httpx.AsyncClient,
) -> Metadata | None:
    data = await fetch_json(
        client,
        SEMANTIC_SCHOLAR_SEARCH_URL,
        params={
            "query": f"ieee {doc_id}",
            "limit": 1,
            "fields": _SEMANTIC_SCHOLAR_FIELDS,
        },
    )
    hits = as_list(as_dict(data).get("data"))
    if not hits or not isinstance(hits[0], dict):
        return None
    return _semantic_scholar_paper_to_metadata(hits[0], url)


def _openalex_work_to_metadata(work: dict[str, Any], url: str) -> Metadata:
    authors = [
        as_dict(a.get("author")).get("display_name")
        for a in as_list(work.get("authorships"))
        if isinstance(a, dict)
    ]
    authors = [name for name in authors if name]
    year = work.get("publication_year")
    source = as_dict(as_dict(work.get("primary_location")).get("source"))
    venue = source.get("display_name")
    doi = work.get("doi")
    return Metadata(
        title=work.get("title") or UNTITLED,
        author=", ".join(authors) or UNKNOWN_AUTHOR,
        authors=authors,
        publish_date=work.get("publication_date") or "",
        publish_year=str(year) if year else None,
        site_name=venue or "IEEE",
        url=url,
        details=PaperDetails(
            doi=doi.removeprefix("https://doi.org/") if isinstance(doi, str) else None,
            journal=venue,
        ),
    )


async def search_openalex(
    doc_id: str, url: str, client: httpx.AsyncClient,
) -> Metadata | None:
    data = await fetch_json(
        client,
        OPENALEX_WORKS_URL,
        params={"search": doc_id, "filter": _OPENALEX_FILTER, "per_page": 1},
    )
    results = as_list(as_dict(data).get("results"))
    if not results or not isinstance(results[0], dict):
        return None
    return _openalex_work_to_metadata(results[0], url)


IEEE_SEARCHES: tuple[Attempt, ...] = (search_semantic_scholar, search_openalex)


async def _attempt_ieee(doc_id: str, url: str, client: httpx.AsyncClient) -> Metadata | None:
    for search in IEEE_SEARCHES:
        try:
            found = await search(doc_id, url, client)
        except (LookupFailed, *PAYLOAD_ERRORS) as exc:
            LOGGER.info(
                "%s failed for IEEE document %s (%s), falling back",
                search.__name__, doc_id, exc,
            )
            continue
        if found is not None:
            return found
        LOGGER.info("%s found nothing for IEEE document %s", search.__name__, doc_id)
    return None


# ── DOI-backed publishers ────────────────────────────────────


def _doi_attempt(to_doi: Callable[[str], str]) -> Attempt:
    """Build an attempt that turns the captured fragment into a DOI."""

    async def attempt(fragment: str, url: str, client: httpx.AsyncClient) -> Metadata | None:
        doi = to_doi(fragment)
        try:
            return await lookup_doi(doi, client)
        except (LookupFailed, *PAYLOAD_ERRORS) as exc:
            LOGGER.info("DOI lookup for %s failed (%s), falling back", doi, exc)
            return None

    return attempt


PUBLISHER_RULES: tuple[PublisherRule, ...] = (
    PublisherRule("IEEE", "ieee", re.compile(r"document/(\d+)"), _attempt_ieee),
    PublisherRule(
        "arXiv", "arxiv", re.compile(r"abs/(\d+\.\d+)"),
        _doi_attempt(lambda arxiv_id: f"10.48550/arXiv.{arxiv_id}"),
    ),
    PublisherRule(
        "Nature", "nature", re.compile(r"articles/([a-z0-9-]+)", re.IGNORECASE),
        _doi_attempt(lambda slug: f"10.1038/{slug}"),
    ),
    PublisherRule(
        "Springer", "springer", re.compile(r"(?:article|chapter)/(10\.\d+/[^?#]+)", re.IGNORECASE),
        _doi_attempt(unquote),
    ),
)


# ── Generic fallback ─────────────────────────────────────────


def _title_from_path(path: str) -> str:
    segments = [p for p in path.split("/") if p]
    if not segments:
        return UNTITLED_PAGE
    words = _EXTENSION.sub("", _SEPARATORS.sub(" ", segments[-1]))
    title = " ".join(w[:1].upper() + w[1:] for w in words.split(" "))
    return title.strip() or UNTITLED_PAGE


def generic_url_metadata(url: str, hostname: str, path: str) -> Metadata:
    """Describe a page from nothing but its URL."""
    label = hostname.split(".")[0]
    return Metadata(
        title=_title_from_path(path),
        author=label[:1].upper() + label[1:] or UNKNOWN_AUTHOR,
        site_name=hostname or url,
        url=url,
    )


def split_url(url: str) -> tuple[str, str]:
    """Return (hostname without ``www.``, path) or raise ``LookupFailed``."""
    try:
        parts = urlsplit(url)
        hostname = (parts.hostname or "").removeprefix("www.")
    except ValueError as exc:
        raise LookupFailed("Invalid URL") from exc
    return hostname, parts.path


async def lookup_url(url: str, client: httpx.AsyncClient) -> Metadata:
    hostname, path = split_url(url)
    for rule in PUBLISHER_RULES:
        fragment = rule.match(hostname, path)
        if fragment is None:
            continue
        LOGGER.debug("%s rule matched %s (%s)", rule.name, url, fragment)
        found = await rule.attempt(fragment, url, client)
        if found is not None:
            return found
        LOGGER.info("%s lookup found nothing for %s, using generic extraction", rule.name, url)
        break
    return generic_url_metadata(url, hostname, path)
