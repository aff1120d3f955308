"""Checklist CSV loading.

The checklist is a table of (scientific name, status code) rows, e.g. a state
flora export where ``N`` marks native taxa. Names may carry authorship or
infraspecific ranks; matching happens later in ``analysis/native_status``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class ChecklistEntry:
    """One checklist row."""

    scientific_name: str
    status: str


def load_checklist(
    path: Path,
    name_column: str = "scientific_name",
    status_column: str = "status",
) -> list[ChecklistEntry]:
    """
    Read checklist rows from a CSV file.

    Rows with an empty name are skipped. Status codes are stripped but keep
    their case; comparison against the native code is case-insensitive.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If either column is missing.
    """
    if not path.exists():
        msg = f"Checklist file not found: {path}"
        raise FileNotFoundError(msg)

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in (name_column, status_column) if c not in df.columns]
    if missing:
        msg = f"Checklist {path} is missing columns: {', '.join(missing)}"
        raise ValueError(msg)

    names = df[name_column].str.strip()
    statuses = df[status_column].str.strip()
    return [
        ChecklistEntry(scientific_name=name, status=status)
        for name, status in zip(names, statuses, strict=True)
        if name
    ]
