"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import logging
import sys
from typing import TYPE_CHECKING

import requests
from pydantic import ValidationError

from occurrence_hotspots import __version__
from occurrence_hotspots.analysis import InvalidCrsError
from occurrence_hotspots.config import get_settings
from occurrence_hotspots.datasources.gbif import (
    CountryNotFoundError,
    NoOccurrencesError,
    search_countries,
)
from occurrence_hotspots.datasources.geoboundaries import ADMIN_LEVELS, BoundaryNotFoundError
from occurrence_hotspots.flows.build import build_all
from occurrence_hotspots.flows.fetch import fetch_all, load_country_table
from occurrence_hotspots.schemas import OccurrenceQuery

if TYPE_CHECKING:
    from collections.abc import Callable

# Errors reported as a one-line message and exit code 1
KNOWN_ERRORS = (
    CountryNotFoundError,
    BoundaryNotFoundError,
    NoOccurrencesError,
    InvalidCrsError,
    ValidationError,
    requests.RequestException,
)


def _add_query_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--species", type=str, default=None, help="Scientific name")
    parser.add_argument("--country", type=str, default=None, help="Country name or ISO code")
    parser.add_argument(
        "--years",
        type=int,
        nargs=2,
        metavar=("START", "END"),
        default=None,
        help="Inclusive year range",
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum records to fetch")
    parser.add_argument(
        "--admin-level",
        type=str.upper,
        choices=ADMIN_LEVELS,
        default=None,
        help="geoBoundaries level to outline (default: admin_level from settings)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="occurrence-hotspots",
        description="Kernel-density hotspot maps of GBIF species occurrences, faceted by year",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    countries_parser = subparsers.add_parser("countries", help="List or search country codes")
    countries_parser.add_argument("--search", type=str, default=None, help="Filter by name/code")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch occurrences and boundary")
    _add_query_args(fetch_parser)
    fetch_parser.add_argument("--force", action="store_true", help="Ignore cached data")

    build_parser = subparsers.add_parser("build", help="Render map and report from cache")
    _add_query_args(build_parser)
    build_parser.add_argument("--epsg", type=int, default=None, help="Planar CRS EPSG code")

    refresh_parser = subparsers.add_parser("refresh", help="Fetch data then build")
    _add_query_args(refresh_parser)
    refresh_parser.add_argument("--epsg", type=int, default=None, help="Planar CRS EPSG code")
    refresh_parser.add_argument("--force", action="store_true", help="Ignore cached data")

    serve_parser = subparsers.add_parser("serve", help="Serve the report locally")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    return parser


def query_from_args(args: argparse.Namespace) -> OccurrenceQuery:
    """Build a query from CLI options, falling back to settings."""
    settings = get_settings()
    years = args.years or (settings.year_start, settings.year_end)
    return OccurrenceQuery(
        scientific_name=args.species or settings.species,
        country=args.country or settings.country,
        year_start=years[0],
        year_end=years[1],
        limit=args.limit if args.limit is not None else settings.limit,
    )


def _reporting_errors(func: Callable[[argparse.Namespace], int]) -> Callable[..., int]:
    """Turn known errors into a stderr message and exit code 1."""

    @functools.wraps(func)
    def wrapper(args: argparse.Namespace) -> int:
        try:
            return func(args)
        except KNOWN_ERRORS as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    return wrapper


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Data dir: {settings.data_dir}")
    print(f"Default query: {settings.species}, {settings.country}, ", end="")
    print(f"{settings.year_start}-{settings.year_end} (limit {settings.limit})")
    return 0


@_reporting_errors
def cmd_countries(args: argparse.Namespace) -> int:
    """Handle the 'countries' command."""
    table = load_country_table()
    rows = search_countries(args.search, table) if args.search else table
    if not rows:
        print(f"No countries match {args.search!r}", file=sys.stderr)
        return 1
    for c in rows:
        print(f"{c.iso2}  {c.iso3}  {c.name}")
    return 0


@_reporting_errors
def cmd_fetch(args: argparse.Namespace) -> int:
    """Handle the 'fetch' command."""
    query = query_from_args(args)
    result = fetch_all(query=query, adm_level=args.admin_level, force=args.force)
    print(f"Fetched {result['occurrences']} records for {result['country']}")
    return 0


@_reporting_errors
def cmd_build(args: argparse.Namespace) -> int:
    """Handle the 'build' command."""
    query = query_from_args(args)
    result = build_all(query=query, adm_level=args.admin_level, target_epsg=args.epsg)
    if "error" in result:
        print(f"Error: {result['error']}. Run 'occurrence-hotspots fetch' first.", file=sys.stderr)
        return 1
    print(f"Map: {result['image']}")
    print(f"Report: {result['output']}")
    return 0


@_reporting_errors
def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch data then build."""
    query = query_from_args(args)
    print(f"Fetching data for {query.scientific_name} in {query.country}...")
    fetch_all(query=query, adm_level=args.admin_level, force=args.force)

    print("Building map...")
    result = build_all(query=query, adm_level=args.admin_level, target_epsg=args.epsg)
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    print(f"Done. Report: {result['output']}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: serve the built report locally."""
    settings = get_settings()
    port = args.port if args.port is not None else settings.api_port
    site_dir = settings.data_dir / "derived" / "site"

    if not site_dir.exists():
        print("No site directory found. Run 'occurrence-hotspots refresh' first.", file=sys.stderr)
        return 1

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_dir))

    with http.server.HTTPServer(("", port), handler) as server:
        print(f"Serving report on http://localhost:{port}/ (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug or get_settings().debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "countries": cmd_countries,
        "fetch": cmd_fetch,
        "build": cmd_build,
        "refresh": cmd_refresh,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
