"""GBIF data source.

Public API:
  - client: Low-level HTTP (throttled, offset-paginated)
  - countries: Country, CountryNotFoundError, fetch_country_table,
    resolve_country, search_countries
  - occurrences: OccurrenceRecord, NoOccurrencesError, fetch_occurrences,
    parse_occurrence
"""

from occurrence_hotspots.datasources.gbif.countries import (
    Country,
    CountryNotFoundError,
    fetch_country_table,
    resolve_country,
    search_countries,
)
from occurrence_hotspots.datasources.gbif.occurrences import (
    NoOccurrencesError,
    OccurrenceRecord,
    build_search_params,
    fetch_occurrences,
    parse_occurrence,
)

__all__ = [
    "Country",
    "CountryNotFoundError",
    "NoOccurrencesError",
    "OccurrenceRecord",
    "build_search_params",
    "fetch_country_table",
    "fetch_occurrences",
    "parse_occurrence",
    "resolve_country",
    "search_countries",
]
