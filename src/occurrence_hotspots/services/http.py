"""
Shared HTTP client with automatic retry and backoff.

Provides a pre-configured ``requests.Session`` that retries on transient
network errors (timeouts, connection resets, 429/502/503/504) with
exponential backoff. GBIF and geoBoundaries clients both go through it.

Usage::

    from occurrence_hotspots.services.http import get_json

    payload = get_json("https://api.gbif.org/v1/occurrence/search", {"limit": 1})
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from occurrence_hotspots import __version__

logger = logging.getLogger(__name__)

#: Default retry strategy for public data APIs.
DEFAULT_RETRY = Retry(
    total=5,
    backoff_factor=1,  # 0s, 1s, 2s, 4s, 8s between retries
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD"],
    respect_retry_after_header=True,
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

# geoBoundaries downloads can be several MB
DEFAULT_TIMEOUT = 60  # seconds

USER_AGENT = f"occurrence-hotspots/{__version__} (+https://pypi.org/project/occurrence-hotspots/)"


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with the retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Timeout applied to every request that does not pass its own.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = USER_AGENT
    s.headers["Accept"] = "application/json"

    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = timeout
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session; import and use directly.
session: requests.Session = create_session()


def get_json(url: str, params: dict[str, Any] | None = None) -> Any:
    """GET ``url`` and decode the JSON body, raising on HTTP errors."""
    logger.debug("GET %s params=%s", url, params)
    resp = session.get(url, params=params or {})
    resp.raise_for_status()
    return resp.json()
