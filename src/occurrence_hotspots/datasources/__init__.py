"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, rate limiting
    └── {feature}.py      # Dataclasses + fetch functions (one per concept)

Sources:
  - gbif: country lookup table and occurrence search
  - geoboundaries: administrative boundary polygons (GeoJSON)

Adding a new datasource
-----------------------
1. Create ``datasources/{name}/`` with files above.
   See ``geoboundaries/`` for a minimal example, ``gbif/`` for a richer one.

2. Write fetch functions that return dicts or dataclasses::

       from occurrence_hotspots.services.http import get_json

       def fetch_something(code: str) -> dict[str, Any]:
           return get_json(API_URL, params={...})

3. Re-export public API in ``__init__.py`` with ``__all__``.

4. Wire into the pipeline (see ``flows/fetch.py``):
   - Add a ``@task`` that calls your fetch function
   - Pick a store tier + path (e.g. ``reference/mydata.json``)
   - Call ``store.write(path, data, source="...", ttl=...)``

5. Add tests in ``tests/test_{name}.py``.
"""
