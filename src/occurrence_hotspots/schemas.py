"""
Domain models for occurrence hotspots.

Pydantic models for query parameters and validated geographic values.
Datasources normalise API responses into their own dataclasses; these models
describe what the user asks for and what the pipeline checks against.
"""

from __future__ import annotations

import hashlib
import json
import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

# =============================================================================
# Query
# =============================================================================


class AdminLevel(StrEnum):
    """geoBoundaries administrative levels."""

    ADM0 = "ADM0"
    ADM1 = "ADM1"
    ADM2 = "ADM2"
    ADM3 = "ADM3"
    ADM4 = "ADM4"
    ADM5 = "ADM5"


class OccurrenceQuery(BaseModel):
    """Filters for a GBIF occurrence search."""

    model_config = {"str_strip_whitespace": True, "frozen": True}

    scientific_name: str = Field(..., min_length=1, description="Taxon scientific name")
    country: str = Field(..., min_length=1, description="Country name or ISO code")
    year_start: int = Field(..., ge=1600)
    year_end: int = Field(..., ge=1600)
    limit: int = Field(default=5000, ge=1, le=100_000, description="Maximum records")
    has_coordinate: bool = True

    @model_validator(mode="after")
    def _check_year_range(self) -> OccurrenceQuery:
        if self.year_start > self.year_end:
            msg = f"year_start ({self.year_start}) is after year_end ({self.year_end})"
            raise ValueError(msg)
        return self

    @property
    def years(self) -> range:
        """Inclusive range of requested years."""
        return range(self.year_start, self.year_end + 1)

    @property
    def slug(self) -> str:
        """Filesystem-friendly name, e.g. ``sciurus-vulgaris_2006-2016``."""
        name = re.sub(r"[^a-z0-9]+", "-", self.scientific_name.lower()).strip("-")
        return f"{name}_{self.year_start}-{self.year_end}"

    def cache_key(self, country_code: str) -> str:
        """Stable short hash of the query, used to name cache files."""
        payload: dict[str, Any] = {
            **self.model_dump(exclude={"country"}),
            "country": country_code.upper(),
        }
        digest = hashlib.sha1(json.dumps(payload, sort_keys=True).encode()).hexdigest()
        return digest[:12]


# =============================================================================
# Geographic
# =============================================================================


class Location(BaseModel):
    """Geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class BoundingBox(BaseModel):
    """Geographic bounding box in decimal degrees."""

    south: float = Field(..., ge=-90, le=90)
    west: float = Field(..., ge=-180, le=180)
    north: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)

    @field_validator("north")
    @classmethod
    def _north_above_south(cls, v: float, info: ValidationInfo) -> float:
        south = info.data.get("south")
        if south is not None and v < south:
            msg = f"north ({v}) is below south ({south})"
            raise ValueError(msg)
        return v

    @classmethod
    def from_bounds(cls, bounds: tuple[float, float, float, float]) -> BoundingBox:
        """Build from a shapely/geopandas ``(minx, miny, maxx, maxy)`` tuple."""
        west, south, east, north = bounds
        return cls(south=south, west=west, north=north, east=east)

    def contains(self, location: Location) -> bool:
        """True if the point lies inside (or on the edge of) the box."""
        return self.south <= location.lat <= self.north and self.west <= location.lon <= self.east


# =============================================================================
# Results
# =============================================================================


class SanityReport(BaseModel):
    """Counts of records that fall outside the expected years or area."""

    total: int
    outside_years: int = 0
    outside_bbox: int = 0
    bbox: BoundingBox | None = None

    @property
    def ok(self) -> bool:
        return self.outside_years == 0 and self.outside_bbox == 0
