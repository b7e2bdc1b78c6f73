"""geoBoundaries administrative boundary data source.

Public API:
  - client: API URL template, admin levels
  - boundaries: fetch_boundary, fetch_boundary_metadata, BoundaryNotFoundError
"""

from occurrence_hotspots.datasources.geoboundaries.boundaries import (
    BoundaryNotFoundError,
    fetch_boundary,
    fetch_boundary_metadata,
)
from occurrence_hotspots.datasources.geoboundaries.client import ADMIN_LEVELS, ID_PROPERTY

__all__ = [
    "ADMIN_LEVELS",
    "ID_PROPERTY",
    "BoundaryNotFoundError",
    "fetch_boundary",
    "fetch_boundary_metadata",
]
