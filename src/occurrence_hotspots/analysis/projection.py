"""Build GeoDataFrames and move them from lon/lat to a planar CRS.

Density is estimated on the projected x/y, so both the points and the
outline must share one metric CRS before rendering.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import geopandas as gpd
import pandas as pd
from pyproj import CRS
from pyproj.exceptions import CRSError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from occurrence_hotspots.datasources.gbif import OccurrenceRecord

WGS84 = "EPSG:4326"


class InvalidCrsError(ValueError):
    """The requested CRS is unknown or not projected."""


OCCURRENCE_COLUMNS = [
    "key",
    "scientific_name",
    "species",
    "year",
    "event_date",
    "basis_of_record",
    "dataset_key",
    "latitude",
    "longitude",
]


def occurrences_to_geodataframe(records: Iterable[OccurrenceRecord]) -> gpd.GeoDataFrame:
    """Point GeoDataFrame (EPSG:4326) with one row per record."""
    df = pd.DataFrame([r.to_dict() for r in records], columns=OCCURRENCE_COLUMNS)
    df["year"] = df["year"].astype("Int64")
    return gpd.GeoDataFrame(
        df,
        geometry=gpd.points_from_xy(df["longitude"], df["latitude"]),
        crs=WGS84,
    )


def boundary_to_geodataframe(geojson: dict[str, Any]) -> gpd.GeoDataFrame:
    """Polygon GeoDataFrame (EPSG:4326) from a GeoJSON FeatureCollection."""
    features = geojson.get("features") or []
    if not features:
        msg = "Boundary GeoJSON has no features"
        raise ValueError(msg)
    return gpd.GeoDataFrame.from_features(features, crs=WGS84)


def choose_planar_crs(reference: gpd.GeoDataFrame, epsg: int | None = None) -> CRS:
    """
    Pick the CRS to project into.

    An explicit EPSG code wins. Otherwise the UTM zone covering the centre
    of ``reference`` is used (e.g. EPSG:32630 for Great Britain).

    Raises:
        InvalidCrsError: ``epsg`` is unknown or names a geographic CRS.
        ValueError: ``reference`` is empty and no EPSG code was given.
    """
    if epsg is not None:
        try:
            crs = CRS.from_epsg(epsg)
        except CRSError as exc:
            msg = f"Unknown EPSG code {epsg}"
            raise InvalidCrsError(msg) from exc
    else:
        if reference.empty:
            msg = "Cannot estimate a UTM zone from an empty layer"
            raise ValueError(msg)
        crs = reference.estimate_utm_crs()

    if not crs.is_projected:
        msg = f"{crs.to_string()} is not a projected CRS"
        raise InvalidCrsError(msg)
    return crs


def reproject(gdf: gpd.GeoDataFrame, crs: CRS | str | int) -> gpd.GeoDataFrame:
    """Reproject and add ``x``/``y`` columns in the target CRS units."""
    if gdf.crs is None:
        gdf = gdf.set_crs(WGS84)
    out = gdf.to_crs(crs)
    if not out.empty and (out.geom_type == "Point").all():
        out["x"] = out.geometry.x
        out["y"] = out.geometry.y
    return out
