"""Per-year counts and sanity checks for fetched occurrences.

GBIF applies the filters server side; these checks only confirm the
response matches what was asked for before it is mapped.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from occurrence_hotspots.schemas import BoundingBox, Location, SanityReport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from occurrence_hotspots.datasources.gbif import OccurrenceRecord
    from occurrence_hotspots.schemas import OccurrenceQuery


def year_counts(records: Iterable[OccurrenceRecord]) -> dict[int, int]:
    """Number of records per year, ascending by year."""
    counts = Counter(r.year for r in records)
    return dict(sorted(counts.items()))


def check_sanity(
    records: list[OccurrenceRecord],
    query: OccurrenceQuery,
    bbox: BoundingBox | None = None,
) -> SanityReport:
    """Count records outside the requested years and (optionally) the bbox."""
    outside_years = sum(1 for r in records if r.year not in query.years)
    outside_bbox = 0
    if bbox is not None:
        outside_bbox = sum(
            1 for r in records if not bbox.contains(Location(lat=r.latitude, lon=r.longitude))
        )
    return SanityReport(
        total=len(records),
        outside_years=outside_years,
        outside_bbox=outside_bbox,
        bbox=bbox,
    )
