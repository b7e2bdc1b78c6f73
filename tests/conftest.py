"""Shared pytest fixtures."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any
from unittest.mock import Mock

import pytest

from occurrence_hotspots.datasources.gbif import client as gbif_client

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture(autouse=True)
def no_throttle(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable the GBIF request throttle so tests never sleep."""
    monkeypatch.setattr(gbif_client, "MIN_REQUEST_INTERVAL", 0.0)


@pytest.fixture
def json_response() -> Callable[[Any], Mock]:
    """Factory for a mocked ``requests.Response`` returning ``payload``."""

    def _make(payload: Any) -> Mock:
        resp = Mock()
        resp.json.return_value = payload
        resp.raise_for_status = Mock()
        return resp

    return _make


SAMPLE_COUNTRIES: list[dict[str, Any]] = [
    {"iso2": "GB", "iso3": "GBR", "title": "United Kingdom of Great Britain and Northern Ireland"},
    {"iso2": "IE", "iso3": "IRL", "title": "Ireland"},
    {"iso2": "IS", "iso3": "ISL", "title": "Iceland"},
    {"iso2": "US", "iso3": "USA", "title": "United States of America"},
    {"iso2": "UM", "iso3": "UMI", "title": "United States Minor Outlying Islands"},
    {"iso2": "NZ", "iso3": "NZL", "title": "New Zealand"},
    {"iso2": "NE", "iso3": "NER", "title": "Niger"},
    {"iso2": "NG", "iso3": "NGA", "title": "Nigeria"},
    {"iso2": "XK", "iso3": None, "title": "Kosovo"},
]


def make_occurrence(key: int, lat: float, lon: float, year: int, **extra: Any) -> dict[str, Any]:
    """A raw GBIF occurrence search result."""
    return {
        "key": key,
        "scientificName": "Sciurus vulgaris Linnaeus, 1758",
        "species": "Sciurus vulgaris",
        "decimalLatitude": lat,
        "decimalLongitude": lon,
        "year": year,
        "eventDate": f"{year}-06-01",
        "countryCode": "GB",
        "basisOfRecord": "HUMAN_OBSERVATION",
        "datasetKey": "50c9509d-22c7-4a22-a47d-8c48425ef4a7",
        **extra,
    }


# Square "country" around northern England, split into two parts.
SAMPLE_BOUNDARY: dict[str, Any] = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"shapeName": "West", "shapeGroup": "GBR", "shapeType": "ADM1"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[-4.0, 53.0], [-2.0, 53.0], [-2.0, 56.0], [-4.0, 56.0], [-4.0, 53.0]]],
            },
        },
        {
            "type": "Feature",
            "properties": {"shapeName": "East", "shapeGroup": "GBR", "shapeType": "ADM1"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[-2.0, 53.0], [0.0, 53.0], [0.0, 56.0], [-2.0, 56.0], [-2.0, 53.0]]],
            },
        },
    ],
}


@pytest.fixture
def sample_countries() -> list[dict[str, Any]]:
    """Raw GBIF country enumeration rows."""
    return copy.deepcopy(SAMPLE_COUNTRIES)


@pytest.fixture
def sample_boundary() -> dict[str, Any]:
    """Two-part ADM1 FeatureCollection."""
    return copy.deepcopy(SAMPLE_BOUNDARY)


@pytest.fixture
def occurrence() -> Callable[..., dict[str, Any]]:
    """Factory for raw GBIF occurrence results."""
    return make_occurrence
