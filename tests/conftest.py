"""Shared fixtures: canned provider payloads and a routing mock transport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

Route = Callable[[httpx.Request], httpx.Response]


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        headers={"content-type": "application/json"},
        content=json.dumps(payload).encode("utf-8"),
    )


def text_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        headers={"content-type": "text/html"},
        content=body.encode("utf-8"),
    )


class RecordingRouter:
    """Dispatch requests by host and remember every request seen."""

    def __init__(self, routes: dict[str, Route | httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.host)
        if route is None:
            raise AssertionError(f"unexpected request to {request.url}")
        return route(request) if callable(route) else route

    @property
    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]


@pytest.fixture
def make_client() -> Callable[..., tuple[httpx.AsyncClient, RecordingRouter]]:
    def _make(routes: dict[str, Route | httpx.Response]) -> tuple[httpx.AsyncClient, RecordingRouter]:
        router = RecordingRouter(routes)
        return httpx.AsyncClient(transport=httpx.MockTransport(router)), router

    return _make


@pytest.fixture
def crossref_work() -> dict[str, Any]:
    return {
        "status": "ok",
        "message": {
            "title": ["Nanometre-scale thermometry in a living cell"],
            "author": [
                {"given": "G.", "family": "Kucsko"},
                {"given": "P. C.", "family": "Maurer"},
            ],
            "published": {"date-parts": [[2013, 7, 31]]},
            "container-title": ["Nature"],
            "publisher": "Springer Science and Business Media LLC",
            "volume": "500",
            "issue": "7460",
        },
    }


@pytest.fixture
def open_library_book() -> dict[str, Any]:
    return {
        "ISBN:9780321125217": {
            "title": "Domain-Driven Design",
            "authors": [{"name": "Eric Evans"}],
            "publish_date": "August 2003",
            "publishers": [{"name": "Addison-Wesley"}],
            "url": "https://openlibrary.org/books/OL7588234M/Domain-Driven_Design",
        }
    }
