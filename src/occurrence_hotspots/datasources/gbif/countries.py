"""Country lookup table: names to ISO-3166 codes.

The table is GBIF's country enumeration, so the ISO-2 code it yields is
exactly what the occurrence search ``country`` filter accepts.
"""

from __future__ import annotations

import difflib
from dataclasses import asdict, dataclass
from typing import Any

from occurrence_hotspots.datasources.gbif import client

# Common names GBIF titles differently.
ALIASES: dict[str, str] = {
    "uk": "GB",
    "united kingdom": "GB",
    "britain": "GB",
    "great britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "wales": "GB",
    "usa": "US",
    "united states": "US",
    "united states of america": "US",
    "america": "US",
    "russia": "RU",
}


class CountryNotFoundError(LookupError):
    """No single country matches the requested name."""

    def __init__(self, name: str, suggestions: list[str] | None = None) -> None:
        self.name = name
        self.suggestions = suggestions or []
        msg = f"Unknown country: {name!r}"
        if self.suggestions:
            msg += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(msg)


@dataclass(frozen=True)
class Country:
    """One row of the lookup table."""

    name: str
    iso2: str
    iso3: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> Country:
        return cls(name=row["name"], iso2=row["iso2"], iso3=row["iso3"])


def _parse_country(row: dict[str, Any]) -> Country | None:
    iso2 = row.get("iso2")
    iso3 = row.get("iso3")
    title = row.get("title")
    if not (iso2 and iso3 and title):
        return None
    return Country(name=title, iso2=iso2.upper(), iso3=iso3.upper())


def fetch_country_table() -> list[Country]:
    """Download the country enumeration, sorted by name."""
    countries = [c for c in map(_parse_country, client.get_countries()) if c is not None]
    return sorted(countries, key=lambda c: c.name)


def search_countries(term: str, table: list[Country]) -> list[Country]:
    """Countries whose name or code contains ``term`` (case-insensitive)."""
    needle = term.strip().lower()
    return [
        c
        for c in table
        if needle in c.name.lower() or needle in (c.iso2.lower(), c.iso3.lower())
    ]


def resolve_country(name: str, table: list[Country]) -> Country:
    """
    Resolve a country name or ISO code to a table row.

    Matching is case-insensitive, in order: alias, ISO-2, ISO-3, exact name,
    then a name prefix that matches exactly one row.

    Raises:
        CountryNotFoundError: nothing matches, or a prefix is ambiguous.
    """
    needle = name.strip().lower()
    if not needle:
        raise CountryNotFoundError(name)

    by_iso2 = {c.iso2.lower(): c for c in table}
    by_iso3 = {c.iso3.lower(): c for c in table}
    by_name = {c.name.lower(): c for c in table}

    alias = ALIASES.get(needle)
    if alias and alias.lower() in by_iso2:
        return by_iso2[alias.lower()]
    if len(needle) == 2 and needle in by_iso2:
        return by_iso2[needle]
    if len(needle) == 3 and needle in by_iso3:
        return by_iso3[needle]
    if needle in by_name:
        return by_name[needle]

    prefixed = [c for c in table if c.name.lower().startswith(needle)]
    if len(prefixed) == 1:
        return prefixed[0]
    if prefixed:
        raise CountryNotFoundError(name, [c.name for c in prefixed[:5]])

    close = difflib.get_close_matches(needle, list(by_name), n=3, cutoff=0.6)
    raise CountryNotFoundError(name, [by_name[n].name for n in close])
