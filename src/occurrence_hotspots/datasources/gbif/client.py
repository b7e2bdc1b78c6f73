"""
GBIF API client.

Low-level HTTP access to the GBIF v1 API: throttling and offset paging.

API docs: https://techdocs.gbif.org/en/openapi/v1/occurrence
Search paging: ``limit`` is capped at 300 per page and ``offset + limit`` at
100 000 per query. Larger extracts need the asynchronous download API.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from occurrence_hotspots.services.http import get_json

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# API configuration
# ---------------------------------------------------------------------------
API_BASE = "https://api.gbif.org/v1"
OCCURRENCE_SEARCH_URL = f"{API_BASE}/occurrence/search"
COUNTRY_ENUMERATION_URL = f"{API_BASE}/enumeration/country"
OCCURRENCE_URL = "https://www.gbif.org/occurrence/{key}"

MAX_PAGE_SIZE = 300
MAX_OFFSET = 100_000

# ---------------------------------------------------------------------------
# Rate limiting (module-level state)
# ---------------------------------------------------------------------------
_last_request_time: float = 0.0
MIN_REQUEST_INTERVAL: float = 0.25  # seconds, ~4 req/s


def _rate_limit() -> None:
    """Sleep if needed to keep under ~4 requests per second."""
    global _last_request_time  # noqa: PLW0603
    now = time.monotonic()
    elapsed = now - _last_request_time
    if elapsed < MIN_REQUEST_INTERVAL:
        time.sleep(MIN_REQUEST_INTERVAL - elapsed)
    _last_request_time = time.monotonic()


def _get(url: str, params: dict[str, Any] | None = None) -> Any:
    _rate_limit()
    return get_json(url, params)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_countries() -> list[dict[str, Any]]:
    """GET /enumeration/country: ISO codes and titles for every country."""
    data: list[dict[str, Any]] = _get(COUNTRY_ENUMERATION_URL)
    return data


def get_occurrences(params: dict[str, Any]) -> dict[str, Any]:
    """GET /occurrence/search: one page of occurrence records."""
    data: dict[str, Any] = _get(OCCURRENCE_SEARCH_URL, params)
    return data


def get_occurrences_paginated(
    params: dict[str, Any],
    *,
    limit: int,
    page_size: int = MAX_PAGE_SIZE,
) -> list[dict[str, Any]]:
    """
    Fetch up to ``limit`` occurrence records by walking ``offset``.

    Stops when ``limit`` records are collected, GBIF reports
    ``endOfRecords``, a page comes back empty, or the offset ceiling is hit.
    The request for the final page is shrunk so no more than ``limit``
    records are ever asked for.

    Returns a flat list of raw record dicts (``results`` concatenated).
    """
    page_size = min(page_size, MAX_PAGE_SIZE)
    all_results: list[dict[str, Any]] = []
    offset = 0
    while len(all_results) < limit and offset < MAX_OFFSET:
        want = min(page_size, limit - len(all_results), MAX_OFFSET - offset)
        data = get_occurrences({**params, "limit": want, "offset": offset})
        results: list[dict[str, Any]] = data.get("results", [])
        all_results.extend(results[:want])
        logger.debug(
            "offset=%d got=%d total=%s end=%s",
            offset,
            len(results),
            data.get("count"),
            data.get("endOfRecords"),
        )
        if not results or data.get("endOfRecords", False):
            break
        offset += len(results)
    return all_results
