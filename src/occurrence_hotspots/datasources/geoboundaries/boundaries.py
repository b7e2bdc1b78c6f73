"""Administrative boundary polygons from geoBoundaries."""

from __future__ import annotations

import logging
from typing import Any

import requests

from occurrence_hotspots.datasources.geoboundaries import client
from occurrence_hotspots.services.http import get_json

logger = logging.getLogger(__name__)


class BoundaryNotFoundError(LookupError):
    """geoBoundaries has no boundary for this country / level."""

    def __init__(self, iso3: str, adm_level: str) -> None:
        self.iso3 = iso3
        self.adm_level = adm_level
        super().__init__(f"No {adm_level} boundary published for {iso3}")


def _check_level(adm_level: str) -> str:
    level = adm_level.upper()
    if level not in client.ADMIN_LEVELS:
        msg = f"Unknown admin level {adm_level!r}; expected one of {', '.join(client.ADMIN_LEVELS)}"
        raise ValueError(msg)
    return level


def fetch_boundary_metadata(iso3: str, adm_level: str = "ADM0") -> dict[str, Any]:
    """
    Fetch the geoBoundaries metadata record for one country and level.

    Raises:
        ValueError: ``adm_level`` is not ADM0-ADM5.
        BoundaryNotFoundError: the API has no such boundary.
    """
    level = _check_level(adm_level)
    url = client.METADATA_URL.format(release=client.RELEASE, iso3=iso3.upper(), adm_level=level)
    try:
        meta = get_json(url)
    except requests.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            raise BoundaryNotFoundError(iso3.upper(), level) from exc
        raise
    except requests.JSONDecodeError as exc:
        # Unknown codes get an HTML error page rather than a 404
        raise BoundaryNotFoundError(iso3.upper(), level) from exc

    if isinstance(meta, list):
        meta = meta[0] if meta else {}
    if not isinstance(meta, dict) or not meta.get("gjDownloadURL"):
        raise BoundaryNotFoundError(iso3.upper(), level)
    return meta


def fetch_boundary(
    iso3: str,
    adm_level: str = "ADM0",
    *,
    simplified: bool = True,
) -> dict[str, Any]:
    """
    Download a boundary as a GeoJSON FeatureCollection (EPSG:4326).

    Args:
        iso3: ISO 3166-1 alpha-3 country code.
        adm_level: Administrative level, ADM0 (country) to ADM5.
        simplified: Prefer the simplified geometry when one is published.

    Returns:
        The GeoJSON dict, with ``boundaryName``/``boundaryISO``/``boundaryType``
        copied into a top-level ``metadata`` key.
    """
    meta = fetch_boundary_metadata(iso3, adm_level)
    url = meta.get("simplifiedGeometryGeoJSON") if simplified else None
    url = url or meta["gjDownloadURL"]

    logger.info("Downloading %s %s boundary from %s", iso3.upper(), adm_level, url)
    geojson: dict[str, Any] = get_json(url)
    if not geojson.get("features"):
        raise BoundaryNotFoundError(iso3.upper(), adm_level.upper())

    geojson["metadata"] = {
        "boundaryName": meta.get("boundaryName"),
        "boundaryISO": meta.get("boundaryISO", iso3.upper()),
        "boundaryType": meta.get("boundaryType", adm_level.upper()),
        "boundarySource": meta.get("boundarySource"),
        "boundaryLicense": meta.get("boundaryLicense"),
    }
    return geojson
