"""Shared GET-and-parse helper for the metadata providers.

Bodies are read as text and parsed here, so a provider that answers with
an HTML error page surfaces as ``MalformedResponse`` instead of a raw
``JSONDecodeError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .errors import LookupFailed, MalformedResponse, NetworkError

LOGGER = logging.getLogger(__name__)

INVALID_RESPONSE = "API returned invalid response"

# Raised while mapping a decoded body whose shape differs from what the
# provider documents.
PAYLOAD_ERRORS: tuple[type[Exception], ...] = (
    ValidationError, KeyError, IndexError, TypeError, AttributeError,
)


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    not_found: str = "Resource not found",
) -> Any:
    """GET *url* and return the decoded JSON body.

    A 404 raises ``LookupFailed(not_found)``; any other error status raises
    ``LookupFailed`` naming the status.
    """
    host = httpx.URL(url).host
    try:
        resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        LOGGER.warning("Request to %s failed: %s", host, exc)
        raise NetworkError(f"Could not reach {host}: {exc}") from exc

    if resp.status_code == 404:
        raise LookupFailed(not_found)
    if resp.status_code >= 400:
        raise LookupFailed(f"{host} responded with HTTP {resp.status_code}")

    text = resp.text
    try:
        return json.loads(text)
    except ValueError as exc:
        LOGGER.debug("Non-JSON response from %s: %s", host, text[:200])
        raise MalformedResponse(INVALID_RESPONSE) from exc
