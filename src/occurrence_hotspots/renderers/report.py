"""HTML summary page for one hotspot map."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from occurrence_hotspots.renderers import render_template

if TYPE_CHECKING:
    from occurrence_hotspots.datasources.gbif import Country
    from occurrence_hotspots.schemas import OccurrenceQuery, SanityReport


def _year_rows(counts: dict[int, int], years: range) -> list[dict[str, Any]]:
    """One row per requested year (zero-filled), plus any out-of-range years."""
    all_years = sorted(set(years) | set(counts))
    peak = max(counts.values(), default=0)
    return [
        {
            "year": year,
            "count": counts.get(year, 0),
            "pct": round(100 * counts.get(year, 0) / peak) if peak else 0,
            "in_range": year in years,
        }
        for year in all_years
    ]


def build_report_html(
    query: OccurrenceQuery,
    country: Country,
    counts: dict[int, int],
    sanity: SanityReport,
    *,
    image_name: str,
    crs_name: str,
    boundary: dict[str, Any] | None = None,
    fetched_at: str = "",
) -> str:
    """Build the full report page.

    Args:
        query: The occurrence query that was mapped.
        country: Resolved country row.
        counts: Records per year (see ``analysis.summary.year_counts``).
        sanity: Result of ``analysis.summary.check_sanity``.
        image_name: Map file name, relative to the page.
        crs_name: Human-readable name of the planar CRS used.
        boundary: geoBoundaries metadata (name, level, source, licence).
        fetched_at: ISO timestamp of the occurrence fetch.
    """
    return render_template(
        "report.html.j2",
        query=query,
        country=country,
        rows=_year_rows(counts, query.years),
        total=sum(counts.values()),
        sanity=sanity,
        image_name=image_name,
        crs_name=crs_name,
        boundary=boundary or {},
        fetched_at=fetched_at,
    )
