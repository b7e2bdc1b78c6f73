"""Cache of fetched data with freshness metadata.

JSON files are organised into tiers by how often their content changes:
  - reference/: Near-static lookups, 90-day TTL (country table, boundaries)
  - occurrences/: GBIF query results keyed by query hash, 24h TTL
  - derived/: Computed outputs, always rebuilt (maps, HTML report)

Every JSON file is wrapped in a metadata envelope with ``valid_until`` so the
fetch flow can skip sources that are still fresh.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path  # noqa: TC003 - used at runtime, not just annotations
from typing import Any

REFERENCE_TTL = timedelta(days=90)
OCCURRENCE_TTL = timedelta(hours=24)


class DataStore:
    """Reads and writes metadata-enveloped JSON under a base directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.reference = base_dir / "reference"
        self.occurrences = base_dir / "occurrences"
        self.derived = base_dir / "derived"

    def read(self, path: Path) -> Any:
        """Return the ``data`` payload of a stored file, or None if missing."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data)."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open(encoding="utf-8") as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        ttl: timedelta | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``reference/countries.json``).
            data: JSON-serialisable payload, stored under the ``data`` key.
            source: Data source identifier (e.g. ``"api.gbif.org"``).
            ttl: How long the payload stays fresh. None means never fresh.
            **params: Extra metadata fields (query parameters, counts, ...).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        now = datetime.now(UTC)
        meta: dict[str, Any] = {"source": source, "fetched_at": now.isoformat()}
        if ttl is not None:
            meta["valid_until"] = (now + ttl).isoformat()
        meta.update(params)

        with full.open("w", encoding="utf-8") as f:
            json.dump({"meta": meta, "data": data}, f, indent=2)
        return full

    def meta(self, path: Path) -> dict[str, Any]:
        """Metadata of a stored file ({} if missing)."""
        envelope = self.read_raw(path) or {}
        result: dict[str, Any] = envelope.get("meta", {})
        return result

    def is_fresh(self, path: Path) -> bool:
        """True if the file exists and its ``valid_until`` has not passed."""
        valid_until = self.meta(path).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
