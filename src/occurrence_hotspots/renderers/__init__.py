"""Rendering: prepared data -> image files and HTML strings.

All renderers follow the same pattern:
  - Input: GeoDataFrames, dataclasses or plain dicts (from analysis/ or store)
  - Output: a written image path, or an HTML string
  - No HTTP, no Prefect decorators

Used by flows/build.py which orchestrates the rendering pipeline.

Public API:
  - hotspot_map: render_hotspot_map (faceted KDE map, PNG)
  - report: build_report_html (summary page around the map)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
