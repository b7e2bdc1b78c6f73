"""Geometry preparation and checks between fetching and rendering.

Dependency rule: analysis/ imports datasource *models* only.
It never fetches data or produces images/HTML.

Modules:
  - projection: records/GeoJSON -> GeoDataFrames, planar CRS choice, reprojection
  - outline: dissolve a multi-part boundary into one outline
  - summary: per-year counts and sanity checks on fetched records
"""

from occurrence_hotspots.analysis.outline import dissolve_outline
from occurrence_hotspots.analysis.projection import (
    WGS84,
    InvalidCrsError,
    boundary_to_geodataframe,
    choose_planar_crs,
    occurrences_to_geodataframe,
    reproject,
)
from occurrence_hotspots.analysis.summary import check_sanity, year_counts

__all__ = [
    "WGS84",
    "InvalidCrsError",
    "boundary_to_geodataframe",
    "check_sanity",
    "choose_planar_crs",
    "dissolve_outline",
    "occurrences_to_geodataframe",
    "reproject",
    "year_counts",
]
