"""
Prefect flow for building the hotspot map and report from fetched data.

Run locally:
    python -m occurrence_hotspots.flows.build
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from occurrence_hotspots.analysis import (
    boundary_to_geodataframe,
    check_sanity,
    choose_planar_crs,
    dissolve_outline,
    occurrences_to_geodataframe,
    reproject,
    year_counts,
)
from occurrence_hotspots.config import default_query, get_settings
from occurrence_hotspots.datasources import gbif, geoboundaries
from occurrence_hotspots.datasources.gbif import Country, NoOccurrencesError, OccurrenceRecord
from occurrence_hotspots.flows import fetch
from occurrence_hotspots.renderers.hotspot_map import render_hotspot_map
from occurrence_hotspots.renderers.report import build_report_html
from occurrence_hotspots.schemas import BoundingBox, OccurrenceQuery
from occurrence_hotspots.store import DataStore

if TYPE_CHECKING:
    import geopandas as gpd
    from pyproj import CRS

store = DataStore(get_settings().data_dir)
SITE_DIR = store.derived / "site"


@dataclass
class Layers:
    """Projected inputs for the renderer."""

    points: gpd.GeoDataFrame
    outline: gpd.GeoDataFrame
    crs: CRS
    bbox: BoundingBox


# =============================================================================
# Data loading tasks
# =============================================================================


@task(name="load-occurrences")
def load_occurrences(
    query: OccurrenceQuery, country: Country
) -> tuple[list[OccurrenceRecord], dict[str, Any]] | None:
    """Load cached occurrence records and their metadata for the query."""
    path = fetch.occurrences_path(query, country)
    rows = store.read(path)
    if rows is None:
        return None
    return [OccurrenceRecord.from_dict(r) for r in rows], store.meta(path)


@task(name="load-boundary")
def load_boundary(iso3: str, adm_level: str) -> dict[str, Any] | None:
    """Load a cached boundary GeoJSON."""
    data: dict[str, Any] | None = store.read(fetch.boundary_path(iso3, adm_level))
    return data


# =============================================================================
# Geometry + rendering tasks
# =============================================================================


@task(name="prepare-layers", cache_policy=NO_CACHE)
def prepare_layers(
    records: list[OccurrenceRecord],
    boundary: dict[str, Any],
    target_epsg: int | None = None,
) -> Layers:
    """Reproject points and boundary to one planar CRS and dissolve the outline."""
    points = occurrences_to_geodataframe(records)
    boundary_gdf = boundary_to_geodataframe(boundary)

    crs = choose_planar_crs(points, target_epsg)
    outline = dissolve_outline(reproject(boundary_gdf, crs), geoboundaries.ID_PROPERTY)
    return Layers(
        points=reproject(points, crs),
        outline=outline,
        crs=crs,
        bbox=BoundingBox.from_bounds(tuple(boundary_gdf.total_bounds)),
    )


@task(name="render-map", cache_policy=NO_CACHE)
def render_map(layers: Layers, query: OccurrenceQuery, country: Country) -> Path:
    """Render the faceted KDE map into the site directory."""
    return render_hotspot_map(
        layers.points,
        layers.outline,
        SITE_DIR / f"{query.slug}_{country.iso2}.png",
        years=query.years,
        title=f"{query.scientific_name}, {country.name}",
    )


@task(name="write-site")
def write_site(html: str) -> Path:
    """Write the report page to the site directory."""
    SITE_DIR.mkdir(parents=True, exist_ok=True)
    output_path = SITE_DIR / "index.html"
    with output_path.open("w", encoding="utf-8") as f:
        f.write(html)
    return output_path


# =============================================================================
# Flow
# =============================================================================


@flow(name="build-site", log_prints=True)
def build_all(
    query: OccurrenceQuery | None = None,
    adm_level: str | None = None,
    target_epsg: int | None = None,
) -> dict[str, Any]:
    """
    Build the hotspot map and report from cached data.

    Returns ``{"error": ...}`` when the fetch flow has not run for this
    query yet.

    Raises:
        NoOccurrencesError: the cached query result is empty.
    """
    settings = get_settings()
    query = query or default_query()
    adm_level = (adm_level or settings.admin_level).upper()
    if target_epsg is None:
        target_epsg = settings.target_epsg

    print("Loading country table...")
    country = gbif.resolve_country(query.country, fetch.load_country_table())

    print("Loading occurrence data...")
    loaded = load_occurrences(query, country)
    if loaded is None:
        print("No occurrence data found. Run fetch flow first.")
        return {"error": "no occurrence data"}
    records, occ_meta = loaded
    if not records:
        raise NoOccurrencesError(query.scientific_name, country.iso2)

    print("Loading boundary...")
    boundary = load_boundary(country.iso3, adm_level)
    if boundary is None:
        print("No boundary found. Run fetch flow first.")
        return {"error": "no boundary data"}

    print("Reprojecting and dissolving...")
    layers = prepare_layers(records, boundary, target_epsg)
    print(f"Using {layers.crs.name} (EPSG:{layers.crs.to_epsg()})")

    sanity = check_sanity(records, query, layers.bbox)
    if not sanity.ok:
        print(
            f"Warning: {sanity.outside_years} records outside the year range, "
            f"{sanity.outside_bbox} outside the boundary bbox."
        )

    print("Rendering map...")
    image_path = render_map(layers, query, country)

    print("Building report...")
    html = build_report_html(
        query,
        country,
        year_counts(records),
        sanity,
        image_name=image_path.name,
        crs_name=f"{layers.crs.name} (EPSG:{layers.crs.to_epsg()})",
        boundary=boundary.get("metadata"),
        fetched_at=occ_meta.get("fetched_at", ""),
    )
    output_path = write_site(html)

    print(f"Site built: {output_path}")
    return {
        "records": len(records),
        "image": str(image_path),
        "output": str(output_path),
        "crs": layers.crs.to_string(),
    }


if __name__ == "__main__":
    result = build_all()
    print(f"Flow complete: {result}")
