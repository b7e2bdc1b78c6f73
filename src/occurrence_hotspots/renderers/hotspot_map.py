"""Faceted kernel-density "hotspot" map.

One panel per year: filled KDE contours of the projected points, the
dissolved outline on top, and the raw points as small dots.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Iterable

    import geopandas as gpd

logger = logging.getLogger(__name__)

# seaborn needs a few distinct points to fit a bivariate KDE
MIN_KDE_POINTS = 3

# Fraction of the outline extent added around each panel
PANEL_PADDING = 0.03


def _facet_frame(points: gpd.GeoDataFrame) -> pd.DataFrame:
    if "x" in points.columns and "y" in points.columns:
        x, y = points["x"], points["y"]
    else:
        x, y = points.geometry.x, points.geometry.y
    return pd.DataFrame(
        {"x": x.to_numpy(), "y": y.to_numpy(), "year": points["year"].astype(int).to_numpy()}
    )


def _can_fit_kde(subset: pd.DataFrame) -> bool:
    return len(subset[["x", "y"]].drop_duplicates()) >= MIN_KDE_POINTS


def render_hotspot_map(
    points: gpd.GeoDataFrame,
    outline: gpd.GeoDataFrame,
    output_path: Path,
    *,
    years: Iterable[int] | None = None,
    col_wrap: int = 4,
    height: float = 4.0,
    levels: int = 10,
    thresh: float = 0.05,
    bw_adjust: float = 1.0,
    cmap: str = "viridis",
    point_size: float = 3.0,
    dpi: int = 150,
    title: str | None = None,
) -> Path:
    """
    Render the per-year density map to ``output_path``.

    Args:
        points: Projected occurrence points with a ``year`` column.
        outline: Dissolved boundary in the same CRS as ``points``.
        output_path: Image file to write (format from the suffix).
        years: Facets to draw, in order. Defaults to the years present.
        col_wrap: Maximum panels per row.
        height: Panel height in inches.
        levels: Number of KDE contour levels.
        thresh: Density below this fraction of the peak is left blank.
        bw_adjust: Multiplier on seaborn's default bandwidth.
        cmap: Matplotlib colormap for the filled contours.
        point_size: Marker area for the raw points.
        dpi: Output resolution.
        title: Optional figure title.

    Returns:
        ``output_path``.

    Raises:
        ValueError: there are no points, or CRS of the layers differ.
    """
    if points.empty:
        msg = "No occurrence points to map"
        raise ValueError(msg)
    if points.crs != outline.crs:
        msg = f"CRS mismatch: points {points.crs} vs outline {outline.crs}"
        raise ValueError(msg)

    data = _facet_frame(points)
    facet_years = sorted(set(years)) if years is not None else sorted(data["year"].unique())

    grid = sns.FacetGrid(
        data,
        col="year",
        col_order=facet_years,
        col_wrap=min(col_wrap, len(facet_years)),
        height=height,
        sharex=False,
        sharey=False,
    )

    minx, miny, maxx, maxy = outline.total_bounds
    pad_x = (maxx - minx) * PANEL_PADDING
    pad_y = (maxy - miny) * PANEL_PADDING

    for year, ax in grid.axes_dict.items():
        subset = data[data["year"] == year]
        if _can_fit_kde(subset):
            sns.kdeplot(
                data=subset,
                x="x",
                y="y",
                fill=True,
                levels=levels,
                thresh=thresh,
                bw_adjust=bw_adjust,
                cmap=cmap,
                alpha=0.85,
                warn_singular=False,
                ax=ax,
            )
        else:
            distinct = len(subset[["x", "y"]].drop_duplicates())
            logger.info("Skipping KDE for %s: only %d distinct points", year, distinct)

        outline.boundary.plot(ax=ax, color="black", linewidth=0.6)
        ax.scatter(subset["x"], subset["y"], s=point_size, c="black", alpha=0.5, linewidths=0)

        ax.set_xlim(minx - pad_x, maxx + pad_x)
        ax.set_ylim(miny - pad_y, maxy + pad_y)
        ax.set_aspect("equal", adjustable="box")
        ax.set_title(f"{year} (n={len(subset)})")
        ax.set_axis_off()

    if title:
        grid.figure.suptitle(title)
    grid.tight_layout()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    grid.savefig(output_path, dpi=dpi)
    plt.close(grid.figure)
    return output_path
