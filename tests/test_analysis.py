"""Tests for reprojection, outline dissolving and sanity checks."""

from __future__ import annotations

from typing import Any

import geopandas as gpd
import pytest
from shapely.geometry import Polygon

from occurrence_hotspots.analysis import (
    WGS84,
    InvalidCrsError,
    boundary_to_geodataframe,
    check_sanity,
    choose_planar_crs,
    dissolve_outline,
    occurrences_to_geodataframe,
    reproject,
    year_counts,
)
from occurrence_hotspots.datasources.gbif import OccurrenceRecord
from occurrence_hotspots.schemas import BoundingBox, OccurrenceQuery


def rec(key: int, lat: float, lon: float, year: int) -> OccurrenceRecord:
    return OccurrenceRecord(
        key=key, scientific_name="Sciurus vulgaris", latitude=lat, longitude=lon, year=year
    )


@pytest.fixture
def records() -> list[OccurrenceRecord]:
    return [
        rec(1, 54.5, -3.0, 2006),
        rec(2, 54.6, -2.9, 2006),
        rec(3, 55.0, -1.6, 2007),
        rec(4, 53.5, -1.0, 2016),
    ]


QUERY = OccurrenceQuery(
    scientific_name="Sciurus vulgaris", country="GB", year_start=2006, year_end=2016
)


class TestOccurrencesToGeoDataFrame:
    """Test point layer construction."""

    def test_points(self, records: list[OccurrenceRecord]) -> None:
        gdf = occurrences_to_geodataframe(records)
        assert len(gdf) == 4
        assert gdf.crs == WGS84
        assert (gdf.geom_type == "Point").all()
        assert gdf.geometry.iloc[0].x == -3.0
        assert gdf.geometry.iloc[0].y == 54.5
        assert list(gdf["year"]) == [2006, 2006, 2007, 2016]

    def test_empty(self) -> None:
        gdf = occurrences_to_geodataframe([])
        assert gdf.empty
        assert gdf.crs == WGS84


class TestBoundaryToGeoDataFrame:
    def test_features(self, sample_boundary: dict[str, Any]) -> None:
        gdf = boundary_to_geodataframe(sample_boundary)
        assert len(gdf) == 2
        assert gdf.crs == WGS84
        assert set(gdf["shapeName"]) == {"West", "East"}

    def test_no_features(self) -> None:
        with pytest.raises(ValueError, match="no features"):
            boundary_to_geodataframe({"type": "FeatureCollection", "features": []})


class TestChoosePlanarCrs:
    """Test CRS selection."""

    def test_estimates_utm_zone(self, records: list[OccurrenceRecord]) -> None:
        crs = choose_planar_crs(occurrences_to_geodataframe(records))
        assert crs.is_projected
        # Points straddle -3..-1 degrees: UTM zone 30N
        assert crs.to_epsg() == 32630

    def test_explicit_epsg(self, records: list[OccurrenceRecord]) -> None:
        crs = choose_planar_crs(occurrences_to_geodataframe(records), 27700)
        assert crs.to_epsg() == 27700

    def test_geographic_epsg_rejected(self, records: list[OccurrenceRecord]) -> None:
        with pytest.raises(InvalidCrsError, match="not a projected CRS"):
            choose_planar_crs(occurrences_to_geodataframe(records), 4326)

    def test_unknown_epsg_rejected(self, records: list[OccurrenceRecord]) -> None:
        with pytest.raises(InvalidCrsError, match="Unknown EPSG code 999999"):
            choose_planar_crs(occurrences_to_geodataframe(records), 999999)

    def test_invalid_crs_is_value_error(self) -> None:
        assert issubclass(InvalidCrsError, ValueError)

    def test_empty_without_epsg(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            choose_planar_crs(occurrences_to_geodataframe([]))


class TestReproject:
    """Test reprojection to metres."""

    def test_points_gain_xy(self, records: list[OccurrenceRecord]) -> None:
        out = reproject(occurrences_to_geodataframe(records), 32630)
        assert out.crs.to_epsg() == 32630
        assert {"x", "y"} <= set(out.columns)
        # Northing of ~54.5N is roughly 6 000 km
        assert 5_900_000 < out["y"].iloc[0] < 6_100_000
        assert out["x"].iloc[0] == pytest.approx(out.geometry.iloc[0].x)

    def test_polygons_have_no_xy(self, sample_boundary: dict[str, Any]) -> None:
        out = reproject(boundary_to_geodataframe(sample_boundary), 32630)
        assert "x" not in out.columns
        assert out.crs.to_epsg() == 32630

    def test_missing_crs_assumed_wgs84(self) -> None:
        gdf = gpd.GeoDataFrame(geometry=gpd.points_from_xy([-3.0], [54.5]))
        out = reproject(gdf, 32630)
        assert out["x"].iloc[0] > 100_000

    def test_does_not_mutate_input(self, records: list[OccurrenceRecord]) -> None:
        gdf = occurrences_to_geodataframe(records)
        reproject(gdf, 32630)
        assert gdf.crs == WGS84
        assert "x" not in gdf.columns


class TestDissolveOutline:
    """Test merging boundary parts."""

    def test_single_row(self, sample_boundary: dict[str, Any]) -> None:
        outline = dissolve_outline(boundary_to_geodataframe(sample_boundary))
        assert len(outline) == 1
        assert outline["shapeGroup"].iloc[0] == "GBR"
        assert outline.geometry.iloc[0].geom_type == "Polygon"
        # Two adjacent 2x3 degree squares
        assert outline.geometry.iloc[0].area == pytest.approx(12.0)
        assert outline.crs == WGS84

    def test_keeps_crs(self, sample_boundary: dict[str, Any]) -> None:
        projected = reproject(boundary_to_geodataframe(sample_boundary), 32630)
        outline = dissolve_outline(projected)
        assert outline.crs.to_epsg() == 32630

    def test_disjoint_parts(self) -> None:
        gdf = gpd.GeoDataFrame(
            {"shapeGroup": ["X", "X"]},
            geometry=[
                Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]),
                Polygon([(5, 5), (6, 5), (6, 6), (5, 6)]),
            ],
            crs=WGS84,
        )
        outline = dissolve_outline(gdf)
        assert len(outline) == 1
        assert outline.geometry.iloc[0].geom_type == "MultiPolygon"

    def test_repairs_invalid(self) -> None:
        bowtie = Polygon([(0, 0), (2, 2), (2, 0), (0, 2)])
        outline = dissolve_outline(gpd.GeoDataFrame(geometry=[bowtie], crs=WGS84), None)
        assert outline.geometry.iloc[0].is_valid

    def test_missing_id_column(self, sample_boundary: dict[str, Any]) -> None:
        outline = dissolve_outline(boundary_to_geodataframe(sample_boundary), "nope")
        assert list(outline.columns) == ["geometry"]

    def test_empty(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            dissolve_outline(gpd.GeoDataFrame(geometry=[], crs=WGS84))


class TestSummary:
    """Test per-year counts and sanity checks."""

    def test_year_counts(self, records: list[OccurrenceRecord]) -> None:
        assert year_counts(records) == {2006: 2, 2007: 1, 2016: 1}

    def test_year_counts_empty(self) -> None:
        assert year_counts([]) == {}

    def test_sanity_ok(self, records: list[OccurrenceRecord]) -> None:
        bbox = BoundingBox(south=49.9, west=-8.6, north=60.9, east=1.8)
        report = check_sanity(records, QUERY, bbox)
        assert report.total == 4
        assert report.ok

    def test_sanity_flags_outliers(self, records: list[OccurrenceRecord]) -> None:
        bbox = BoundingBox(south=49.9, west=-8.6, north=60.9, east=1.8)
        bad = [*records, rec(5, 48.85, 2.35, 2010), rec(6, 54.0, -2.0, 2019)]
        report = check_sanity(bad, QUERY, bbox)
        assert report.outside_bbox == 1
        assert report.outside_years == 1
        assert not report.ok

    def test_sanity_without_bbox(self, records: list[OccurrenceRecord]) -> None:
        report = check_sanity(records, QUERY)
        assert report.outside_bbox == 0
        assert report.bbox is None
