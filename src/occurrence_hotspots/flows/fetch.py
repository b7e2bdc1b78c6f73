"""
Prefect flow for fetching occurrences and boundaries.

Run locally:
    python -m occurrence_hotspots.flows.fetch

Run with Prefect dashboard:
    prefect server start &
    python -m occurrence_hotspots.flows.fetch
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from prefect import flow, task

from occurrence_hotspots.config import default_query, get_settings
from occurrence_hotspots.datasources import gbif, geoboundaries
from occurrence_hotspots.datasources.gbif import Country
from occurrence_hotspots.schemas import OccurrenceQuery
from occurrence_hotspots.store import OCCURRENCE_TTL, REFERENCE_TTL, DataStore

store = DataStore(get_settings().data_dir)

COUNTRIES_PATH = Path("reference/countries.json")


def boundary_path(iso3: str, adm_level: str) -> Path:
    """Store path of a cached boundary, e.g. ``reference/boundaries/GBR_ADM1.json``."""
    return Path(f"reference/boundaries/{iso3.upper()}_{adm_level.upper()}.json")


def occurrences_path(query: OccurrenceQuery, country: Country) -> Path:
    """Store path of a cached query result, unique per query + country."""
    key = query.cache_key(country.iso2)
    return Path(f"occurrences/{query.slug}_{country.iso2}_{key}.json")


# =============================================================================
# Country lookup table
# =============================================================================


@task(name="fetch-countries", retries=2, retry_delay_seconds=5)
def fetch_countries() -> list[dict[str, str]]:
    """Download the GBIF country table."""
    return [c.to_dict() for c in gbif.fetch_country_table()]


@task(name="save-countries")
def save_countries(rows: list[dict[str, str]]) -> Path:
    """Save the country table to the reference tier."""
    return store.write(COUNTRIES_PATH, rows, source="api.gbif.org", ttl=REFERENCE_TTL)


def load_country_table(*, force: bool = False) -> list[Country]:
    """Country table from the store, fetching it first if stale or missing."""
    if force or not store.is_fresh(COUNTRIES_PATH):
        print("Fetching GBIF country table...")
        save_countries(fetch_countries())
    rows: list[dict[str, Any]] = store.read(COUNTRIES_PATH) or []
    return [Country.from_dict(r) for r in rows]


# =============================================================================
# Occurrences
# =============================================================================


@task(name="fetch-occurrences", retries=2, retry_delay_seconds=5)
def fetch_occurrences(query: OccurrenceQuery, country: Country) -> list[dict[str, Any]]:
    """Fetch occurrence records from GBIF."""
    return [r.to_dict() for r in gbif.fetch_occurrences(query, country)]


@task(name="save-occurrences")
def save_occurrences(
    query: OccurrenceQuery, country: Country, records: list[dict[str, Any]]
) -> Path:
    """Save a query result to the occurrences tier."""
    return store.write(
        occurrences_path(query, country),
        records,
        source="api.gbif.org",
        ttl=OCCURRENCE_TTL,
        query=query.model_dump(),
        country=country.to_dict(),
        count=len(records),
    )


# =============================================================================
# Boundaries
# =============================================================================


@task(name="fetch-boundary", retries=2, retry_delay_seconds=5)
def fetch_boundary(iso3: str, adm_level: str) -> dict[str, Any]:
    """Fetch a boundary GeoJSON from geoBoundaries."""
    return geoboundaries.fetch_boundary(iso3, adm_level)


@task(name="save-boundary")
def save_boundary(iso3: str, adm_level: str, geojson: dict[str, Any]) -> Path:
    """Save a boundary to the reference tier."""
    return store.write(
        boundary_path(iso3, adm_level),
        geojson,
        source="geoboundaries.org",
        ttl=REFERENCE_TTL,
        iso3=iso3.upper(),
        adm_level=adm_level.upper(),
    )


# =============================================================================
# Flow
# =============================================================================


@flow(name="fetch-data", log_prints=True)
def fetch_all(
    query: OccurrenceQuery | None = None,
    adm_level: str | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """
    Fetch everything a map needs.

    Resolves the country, then fetches occurrences and the boundary.
    Checks freshness before each fetch and skips sources that are still
    valid, unless ``force`` is set.
    """
    query = query or default_query()
    adm_level = (adm_level or get_settings().admin_level).upper()

    # --- Country ---
    country = gbif.resolve_country(query.country, load_country_table(force=force))
    print(f"Resolved {query.country!r} to {country.name} ({country.iso2}/{country.iso3})")

    # --- Occurrences ---
    occ_path = occurrences_path(query, country)
    if not force and store.is_fresh(occ_path):
        print("Occurrence data is fresh, skipping fetch.")
        records = store.read(occ_path) or []
    else:
        print(
            f"Fetching up to {query.limit} records of {query.scientific_name} "
            f"in {country.iso2}, {query.year_start}-{query.year_end}..."
        )
        records = fetch_occurrences(query, country)
        saved = save_occurrences(query, country, records)
        print(f"Saved {len(records)} occurrence records to {saved}")

    # --- Boundary ---
    b_path = boundary_path(country.iso3, adm_level)
    if not force and store.is_fresh(b_path):
        print("Boundary data is fresh, skipping fetch.")
        geojson = store.read(b_path) or {}
    else:
        print(f"Fetching {adm_level} boundary for {country.iso3}...")
        geojson = fetch_boundary(country.iso3, adm_level)
        saved = save_boundary(country.iso3, adm_level, geojson)
        print(f"Saved {len(geojson.get('features', []))} boundary features to {saved}")

    return {
        "country": country.iso2,
        "occurrences": len(records),
        "boundary_features": len(geojson.get("features", [])),
        "occurrences_path": str(occ_path),
        "boundary_path": str(b_path),
    }


if __name__ == "__main__":
    result = fetch_all()
    print(f"Flow complete: {result}")
