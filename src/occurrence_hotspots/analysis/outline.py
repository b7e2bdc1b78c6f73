"""Dissolve administrative units into a single outline polygon."""

from __future__ import annotations

import logging

import geopandas as gpd

logger = logging.getLogger(__name__)


def dissolve_outline(
    boundary: gpd.GeoDataFrame,
    id_column: str | None = "shapeGroup",
) -> gpd.GeoDataFrame:
    """
    Union every part of ``boundary`` into one geometry.

    Args:
        boundary: Polygons in any CRS (the result keeps it).
        id_column: Attribute carried over from the first row so the outline
            stays identifiable. Ignored when missing.

    Returns:
        A one-row GeoDataFrame holding the dissolved outline.
    """
    if boundary.empty:
        msg = "Cannot dissolve an empty boundary"
        raise ValueError(msg)

    parts = boundary.geometry
    invalid = ~parts.is_valid
    if invalid.any():
        logger.debug("Repairing %d invalid boundary parts before union", int(invalid.sum()))
        parts = parts.make_valid()

    data: dict[str, list[object]] = {}
    if id_column and id_column in boundary.columns:
        data[id_column] = [boundary[id_column].iloc[0]]
    return gpd.GeoDataFrame(data, geometry=[parts.union_all()], crs=boundary.crs)
