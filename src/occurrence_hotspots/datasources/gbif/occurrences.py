"""Occurrence record fetching and parsing."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from occurrence_hotspots.datasources.gbif import client

if TYPE_CHECKING:
    from occurrence_hotspots.datasources.gbif.countries import Country
    from occurrence_hotspots.schemas import OccurrenceQuery

logger = logging.getLogger(__name__)


class NoOccurrencesError(RuntimeError):
    """The query matched no georeferenced records."""

    def __init__(self, scientific_name: str, country_code: str) -> None:
        self.scientific_name = scientific_name
        self.country_code = country_code
        super().__init__(f"No georeferenced records of {scientific_name} in {country_code}")


# =============================================================================
# Data Model
# =============================================================================


@dataclass
class OccurrenceRecord:
    """A single georeferenced occurrence from GBIF."""

    key: int
    scientific_name: str
    latitude: float
    longitude: float
    year: int
    species: str | None = None
    event_date: str | None = None
    country_code: str | None = None
    basis_of_record: str | None = None
    dataset_key: str | None = None
    institution_code: str | None = None
    recorded_by: str | None = None
    uncertainty_m: float | None = None

    @property
    def url(self) -> str:
        return client.OCCURRENCE_URL.format(key=self.key)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> OccurrenceRecord:
        return cls(**row)


# =============================================================================
# Parsing
# =============================================================================


def _as_float(value: Any) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def parse_occurrence(raw: dict[str, Any]) -> OccurrenceRecord | None:
    """Parse one search result. Returns None without a usable key, coordinates or year."""
    lat = _as_float(raw.get("decimalLatitude"))
    lon = _as_float(raw.get("decimalLongitude"))
    if lat is None or lon is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None

    try:
        key = int(raw["key"])
        year = int(raw["year"])
    except (KeyError, TypeError, ValueError):
        return None

    return OccurrenceRecord(
        key=key,
        scientific_name=raw.get("scientificName", "Unknown"),
        species=raw.get("species"),
        latitude=lat,
        longitude=lon,
        year=year,
        event_date=raw.get("eventDate"),
        country_code=raw.get("countryCode"),
        basis_of_record=raw.get("basisOfRecord"),
        dataset_key=raw.get("datasetKey"),
        institution_code=raw.get("institutionCode"),
        recorded_by=raw.get("recordedBy"),
        uncertainty_m=_as_float(raw.get("coordinateUncertaintyInMeters")),
    )


# =============================================================================
# API Fetching
# =============================================================================


def build_search_params(query: OccurrenceQuery, country: Country) -> dict[str, Any]:
    """Translate a query into GBIF occurrence search parameters."""
    return {
        "scientificName": query.scientific_name,
        "country": country.iso2,
        "hasCoordinate": str(query.has_coordinate).lower(),
        "year": f"{query.year_start},{query.year_end}",
    }


def fetch_occurrences(query: OccurrenceQuery, country: Country) -> list[OccurrenceRecord]:
    """
    Fetch occurrence records matching ``query`` inside ``country``.

    Args:
        query: Taxon, year range and result limit.
        country: Resolved country (its ISO-2 code is sent to GBIF).

    Returns:
        Parsed records; rows without coordinates or a year are dropped.
    """
    params = build_search_params(query, country)
    raw = client.get_occurrences_paginated(params, limit=query.limit)

    records: list[OccurrenceRecord] = []
    for row in raw:
        parsed = parse_occurrence(row)
        if parsed is not None:
            records.append(parsed)

    dropped = len(raw) - len(records)
    if dropped:
        logger.warning("Dropped %d of %d records without coordinates or year", dropped, len(raw))
    return records
