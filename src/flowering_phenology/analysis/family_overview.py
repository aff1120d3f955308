"""Per-family species counts for the overview table."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowering_phenology.schemas import CATEGORY_ORDER, AbundanceCategory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowering_phenology.analysis.profiles import SpeciesProfile


@dataclass(frozen=True)
class FamilyRow:
    """One family's species tallies."""

    family: str
    by_category: tuple[tuple[AbundanceCategory, int], ...]
    species: int
    native_species: int
    with_phenology: int
    observations: int

    def count(self, category: AbundanceCategory) -> int:
        return dict(self.by_category).get(category, 0)


def family_overview(profiles: Iterable[SpeciesProfile]) -> list[FamilyRow]:
    """
    Tally classified species per family, sorted by family name.

    Species without phenology still count here; this table is about what
    was observed, not when it flowered.
    """
    grouped: dict[str, list[SpeciesProfile]] = defaultdict(list)
    for p in profiles:
        grouped[p.family].append(p)

    rows = []
    for family in sorted(grouped):
        members = grouped[family]
        rows.append(
            FamilyRow(
                family=family,
                by_category=tuple(
                    (cat, sum(1 for p in members if p.category is cat)) for cat in CATEGORY_ORDER
                ),
                species=len(members),
                native_species=sum(1 for p in members if p.native),
                with_phenology=sum(1 for p in members if p.has_phenology),
                observations=sum(p.counts.total for p in members),
            )
        )
    return rows
