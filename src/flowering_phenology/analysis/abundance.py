"""Abundance classification from narrow- and broad-region counts."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowering_phenology.schemas import AbundanceCategory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowering_phenology.config import AbundanceThresholds
    from flowering_phenology.datasources.occurrences import Occurrence


@dataclass(frozen=True)
class RegionCounts:
    """Observation counts for one species."""

    narrow: int
    broad: int
    total: int


def classify_abundance(
    narrow: int,
    broad: int,
    thresholds: AbundanceThresholds,
) -> AbundanceCategory | None:
    """
    Assign the abundance category for a species.

    The narrow-region count decides first; the broad-region count only
    matters when the species has no narrow-region observations at all.

    Args:
        narrow: Observations in the narrow region (c).
        broad: Observations in the broad region (n).
        thresholds: ``rare_max``, ``uncommon_max`` and ``ne_rare_max``.

    Returns:
        The category, or None when both counts are zero (unclassified).

    Raises:
        ValueError: If either count is negative.
    """
    if narrow < 0 or broad < 0:
        msg = f"Counts must be non-negative (narrow={narrow}, broad={broad})"
        raise ValueError(msg)

    if narrow > thresholds.uncommon_max:
        return AbundanceCategory.CT_COMMON
    if narrow > thresholds.rare_max:
        return AbundanceCategory.CT_UNCOMMON
    if narrow >= 1:
        return AbundanceCategory.CT_RARE
    if broad > thresholds.ne_rare_max:
        return AbundanceCategory.NE_ONLY
    if broad >= 1:
        return AbundanceCategory.NE_RARE
    return None


def count_by_region(
    occurrences: Iterable[Occurrence],
    narrow_regions: Iterable[str],
    broad_regions: Iterable[str],
) -> dict[str, RegionCounts]:
    """Count observations per species in the narrow and broad region lists.

    A region may sit in both lists, in which case its observations count
    toward both scopes.
    """
    narrow_set = frozenset(narrow_regions)
    broad_set = frozenset(broad_regions)
    narrow: Counter[str] = Counter()
    broad: Counter[str] = Counter()
    total: Counter[str] = Counter()
    for occ in occurrences:
        total[occ.scientific_name] += 1
        if occ.region in narrow_set:
            narrow[occ.scientific_name] += 1
        if occ.region in broad_set:
            broad[occ.scientific_name] += 1
    return {
        name: RegionCounts(narrow=narrow[name], broad=broad[name], total=total[name])
        for name in sorted(total)
    }
