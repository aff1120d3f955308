"""Native-status join against the regional checklist."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowering_phenology.analysis.taxonomy import name_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowering_phenology.datasources.checklist import ChecklistEntry


@dataclass(frozen=True)
class NativeJoin:
    """Result of the left join: a flag per species plus the misses."""

    native: dict[str, bool]
    unmatched: tuple[str, ...]

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)


def join_native_status(
    species: Iterable[str],
    checklist: Iterable[ChecklistEntry],
    native_code: str = "N",
) -> NativeJoin:
    """
    Attach a native flag to each species name.

    Checklist names are keyed the same way as species names (case-folded,
    trimmed, collapsed to species level), so a native variety marks its
    species native. A species is native if any matching row carries the
    native code. Species missing from the checklist default to non-native
    and are reported in ``unmatched``.
    """
    code = native_code.strip().casefold()
    index: dict[str, bool] = {}
    for entry in checklist:
        key = name_key(entry.scientific_name)
        index[key] = index.get(key, False) or entry.status.strip().casefold() == code

    native: dict[str, bool] = {}
    unmatched: list[str] = []
    for name in species:
        key = name_key(name)
        if key not in index:
            unmatched.append(name)
        native[name] = index.get(key, False)
    return NativeJoin(native=native, unmatched=tuple(unmatched))
