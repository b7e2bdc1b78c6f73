"""
Prefect flows for the data pipeline.

Flows:
- fetch: Country table, GBIF occurrences and geoBoundaries outline -> store
- build: Reproject, dissolve, render the faceted KDE map and HTML report

Usage (local):
    python -m occurrence_hotspots.flows.fetch
    python -m occurrence_hotspots.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    python -m occurrence_hotspots.flows.fetch
"""
