"""Tiered data store for inputs, caches and report outputs.

Directory tiers under the base directory:
  - raw/: User-supplied inputs (DwC archive, checklist CSV). Never written here.
  - reference/: Slow-changing lookups (iNaturalist common names).
  - derived/: Outputs recomputed on every run (reports, JSON snapshots).

JSON files are wrapped in a metadata envelope (``meta`` + ``data``) recording
the source and write time. Freshness of cached lookups is tracked per entry
by the cache that owns the file.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any


class DataStore:
    """Reads and writes metadata-enveloped JSON files under a base directory."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.raw = base_dir / "raw"
        self.reference = base_dir / "reference"
        self.derived = base_dir / "derived"

    @property
    def reports(self) -> Path:
        """Directory that receives the rendered documents."""
        return self.derived / "reports"

    def read(self, path: Path) -> Any | None:
        """Read the ``data`` payload of an enveloped JSON file.

        Returns None if the file doesn't exist. Files without an envelope are
        returned whole.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        The file is written to a sibling temp file and renamed into place, so
        an interrupted run never leaves a truncated cache behind.

        Args:
            path: Relative path under base_dir (e.g. ``reference/common_names.json``).
            data: Payload to store under the ``data`` key.
            source: Data source identifier (e.g. ``"inaturalist.org"``).
            **params: Extra metadata fields (run parameters, counts, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "written_at": datetime.now(UTC).isoformat(),
        }
        if params:
            meta.update(params)

        tmp = full.with_suffix(full.suffix + ".tmp")
        with tmp.open("w") as f:
            json.dump({"meta": meta, "data": data}, f, indent=2, sort_keys=True, default=str)
        tmp.replace(full)
        return full

    def output_path(self, name: str) -> Path:
        """Absolute path for a report file, creating the reports directory."""
        self.reports.mkdir(parents=True, exist_ok=True)
        return self.reports / name

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
