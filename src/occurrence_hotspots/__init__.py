"""Occurrence Hotspots - species occurrence density maps faceted by year.

Architecture::

    datasources/   External APIs (GBIF occurrences + country table, geoBoundaries)
    store.py       Cache with TTL (reference -> occurrences -> derived)
    analysis/      Reprojection, outline dissolving, sanity checks
    renderers/     Faceted KDE map (PNG) and HTML report
    flows/         Prefect orchestration (fetch checks freshness, build renders)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources -> store (cache) -> analysis -> renderers -> derived/
"""

__version__ = "0.1.0"

from occurrence_hotspots.config import Settings
from occurrence_hotspots.schemas import OccurrenceQuery

__all__ = ["OccurrenceQuery", "Settings", "__version__"]
