"""geoBoundaries API constants.

API docs: https://www.geoboundaries.org/api.html
The metadata endpoint returns a JSON object naming GeoJSON download URLs
(full resolution and simplified). The GeoJSON itself is served from GitHub.
"""

from occurrence_hotspots.schemas import AdminLevel

API_BASE = "https://www.geoboundaries.org/api/current"
RELEASE = "gbOpen"

METADATA_URL = API_BASE + "/{release}/{iso3}/{adm_level}/"

ADMIN_LEVELS = tuple(level.value for level in AdminLevel)

# Feature property that identifies the country in every geoBoundaries file.
ID_PROPERTY = "shapeGroup"
