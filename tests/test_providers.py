"""Provider parsing and failure mapping against stubbed registries."""

from __future__ import annotations

import httpx
import pytest

from conftest import json_response, text_response

from automation.citation_extractor.errors import (
    LookupFailed,
    MalformedResponse,
    NetworkError,
)
from automation.citation_extractor.models import BookDetails, PaperDetails, VideoDetails
from automation.citation_extractor.providers import (
    lookup_doi,
    lookup_isbn,
    lookup_youtube,
)


async def test_doi_maps_crossref_work(make_client, crossref_work) -> None:
    client, router = make_client({"api.crossref.org": json_response(crossref_work)})
    async with client:
        meta = await lookup_doi("10.1038/nature12373", client)

    assert meta.title == "Nanometre-scale thermometry in a living cell"
    assert meta.author == "G. Kucsko, P. C. Maurer"
    assert meta.authors == ["G. Kucsko", "P. C. Maurer"]
    assert meta.year == "2013"
    assert meta.publish_date == "2013-01-01"
    assert meta.site_name == "Nature"
    assert meta.url == "https://doi.org/10.1038/nature12373"
    assert isinstance(meta.details, PaperDetails)
    assert meta.details.doi == "10.1038/nature12373"
    assert (meta.details.volume, meta.details.issue) == ("500", "7460")
    assert router.hosts == ["api.crossref.org"]
    assert router.requests[0].url.path.endswith("nature12373")


async def test_doi_site_name_falls_back_to_publisher(make_client) -> None:
    work = {"message": {"title": [], "publisher": "ACM", "issued": {"date-parts": [[2019]]}}}
    client, _ = make_client({"api.crossref.org": json_response(work)})
    async with client:
        meta = await lookup_doi("10.1145/123456", client)
    assert meta.title == "Untitled"
    assert meta.author == "Unknown Author"
    assert meta.site_name == "ACM"
    assert meta.year == "2019"


async def test_doi_not_found_on_404(make_client) -> None:
    client, _ = make_client({"api.crossref.org": text_response("Resource not found.", 404)})
    async with client:
        with pytest.raises(LookupFailed, match="^DOI not found$"):
            await lookup_doi("10.9999/missing", client)


async def test_doi_without_message_is_not_found(make_client) -> None:
    client, _ = make_client({"api.crossref.org": json_response({"status": "ok"})})
    async with client:
        with pytest.raises(LookupFailed, match="^DOI not found$"):
            await lookup_doi("10.9999/missing", client)


async def test_non_json_body_is_malformed(make_client) -> None:
    client, _ = make_client({"api.crossref.org": text_response("<html>busy</html>")})
    async with client:
        with pytest.raises(MalformedResponse, match="invalid response"):
            await lookup_doi("10.1038/nature12373", client)


async def test_transport_error_is_network_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        with pytest.raises(NetworkError, match="api.crossref.org"):
            await lookup_doi("10.1038/nature12373", client)


async def test_isbn_maps_open_library_record(make_client, open_library_book) -> None:
    client, router = make_client({"openlibrary.org": json_response(open_library_book)})
    async with client:
        meta = await lookup_isbn("9780321125217", client)

    assert meta.title == "Domain-Driven Design"
    assert meta.author == "Eric Evans"
    assert meta.year == "2003"
    assert meta.site_name == "Addison-Wesley"
    assert meta.url.startswith("https://openlibrary.org/books/")
    assert meta.details == BookDetails(publisher="Addison-Wesley", isbn="9780321125217")
    assert router.requests[0].url.params["bibkeys"] == "ISBN:9780321125217"
    assert router.requests[0].url.params["jscmd"] == "data"


async def test_isbn_missing_key_is_not_found(make_client) -> None:
    client, _ = make_client({"openlibrary.org": json_response({})})
    async with client:
        with pytest.raises(LookupFailed, match="^ISBN not found$"):
            await lookup_isbn("0000000000", client)


async def test_isbn_defaults_when_record_is_sparse(make_client) -> None:
    client, _ = make_client({"openlibrary.org": json_response({"ISBN:0321125215": {}})})
    async with client:
        meta = await lookup_isbn("0321125215", client)
    assert meta.site_name == "Publisher"
    assert meta.url == "https://openlibrary.org/isbn/0321125215"
    assert meta.year is None


async def test_youtube_maps_noembed_payload(make_client) -> None:
    payload = {"title": "Never Gonna Give You Up", "author_name": "Rick Astley"}
    client, router = make_client({"noembed.com": json_response(payload)})
    async with client:
        meta = await lookup_youtube("dQw4w9WgXcQ", client)

    assert meta.title == "Never Gonna Give You Up"
    assert meta.author == "Rick Astley"
    assert meta.site_name == "YouTube"
    assert meta.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert meta.details == VideoDetails(channel_title="Rick Astley")
    assert router.requests[0].url.params["url"] == meta.url


async def test_youtube_error_field_is_not_found(make_client) -> None:
    client, _ = make_client({"noembed.com": json_response({"error": "404 Not Found"})})
    async with client:
        with pytest.raises(LookupFailed, match="^YouTube video not found$"):
            await lookup_youtube("xxxxxxxxxxx", client)


async def test_isbn_publishers_object_instead_of_list(make_client) -> None:
    book = {"ISBN:9780321125217": {"title": "T", "publishers": {"name": "X"}, "authors": "Eric"}}
    client, _ = make_client({"openlibrary.org": json_response(book)})
    async with client:
        meta = await lookup_isbn("9780321125217", client)
    assert meta.site_name == "Publisher"
    assert meta.author == "Unknown Author"


async def test_doi_tolerates_oddly_shaped_work(make_client) -> None:
    work = {
        "message": {
            "title": "Plain Title",
            "author": {"given": "A", "family": "B"},
            "published": {"date-parts": "2013"},
            "issued": {"date-parts": [[2014]]},
        }
    }
    client, _ = make_client({"api.crossref.org": json_response(work)})
    async with client:
        meta = await lookup_doi("10.1234/odd", client)
    assert meta.title == "Plain Title"
    assert meta.authors == []
    assert meta.year == "2014"
