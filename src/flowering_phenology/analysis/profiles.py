"""Per-species profile assembly.

Joins region counts, abundance category, native status, common names and
phenology into one immutable ``SpeciesProfile`` per species. This is the
record every planner and renderer consumes, so required fields are always
resolved here (no ``None`` category, no missing family).
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowering_phenology.analysis.abundance import (
    RegionCounts,
    classify_abundance,
    count_by_region,
)
from flowering_phenology.analysis.phenology import (
    PhenologySummary,
    WeeklyBin,
    earliest_flowering_dates,
    summarize_phenology,
    weekly_bins,
)
from flowering_phenology.analysis.taxonomy import genus_of

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from flowering_phenology.analysis.native_status import NativeJoin
    from flowering_phenology.config import PipelineConfig
    from flowering_phenology.datasources.occurrences import Occurrence
    from flowering_phenology.schemas import AbundanceCategory

logger = logging.getLogger(__name__)

UNKNOWN_FAMILY = "Unknown family"


@dataclass(frozen=True)
class SpeciesProfile:
    """Everything the reports know about one classified species."""

    scientific_name: str
    genus: str
    family: str
    common_name: str
    native: bool
    counts: RegionCounts
    category: AbundanceCategory
    bins: tuple[WeeklyBin, ...]
    phenology: PhenologySummary | None

    @property
    def has_phenology(self) -> bool:
        return self.phenology is not None

    @property
    def display_name(self) -> str:
        """Scientific name with the common name in parentheses when known."""
        if self.common_name:
            return f"{self.scientific_name} ({self.common_name})"
        return self.scientific_name


@dataclass(frozen=True)
class ProfileSet:
    """Classified profiles plus the species left out of them, by reason."""

    profiles: tuple[SpeciesProfile, ...]
    unclassified: tuple[str, ...]
    no_phenology: tuple[str, ...]
    spans_year_boundary: tuple[str, ...]

    @property
    def species_total(self) -> int:
        return len(self.profiles) + len(self.unclassified)


def _families(occurrences: Sequence[Occurrence]) -> dict[str, str]:
    """Most frequent non-empty family per species (alphabetical on ties)."""
    seen: dict[str, Counter[str]] = defaultdict(Counter)
    for occ in occurrences:
        if occ.family:
            seen[occ.scientific_name][occ.family] += 1
    return {
        name: min(counts.items(), key=lambda kv: (-kv[1], kv[0]))[0]
        for name, counts in seen.items()
    }


def build_profiles(
    occurrences: Sequence[Occurrence],
    native: NativeJoin,
    config: PipelineConfig,
    common_names: Mapping[str, str] | None = None,
) -> ProfileSet:
    """
    Assemble profiles for every species in the (normalized) occurrences.

    Args:
        occurrences: Species-level occurrences (see ``taxonomy.normalize_occurrences``).
        native: Result of the checklist join.
        config: Run configuration (thresholds, percentiles, tiers).
        common_names: Optional resolved common names; missing names stay blank.

    Returns:
        Profiles sorted by scientific name, and the excluded species.
    """
    common_names = common_names or {}
    counts = count_by_region(occurrences, config.narrow_regions, config.broad_regions)
    bins = weekly_bins(occurrences)
    earliest = earliest_flowering_dates(occurrences)
    narrow_set = frozenset(config.narrow_regions)
    narrow_flowering = Counter(
        occ.scientific_name for occ in occurrences if occ.flowering and occ.region in narrow_set
    )
    families = _families(occurrences)

    profiles: list[SpeciesProfile] = []
    unclassified: list[str] = []
    no_phenology: list[str] = []
    boundary: list[str] = []
    for name, region_counts in counts.items():
        category = classify_abundance(region_counts.narrow, region_counts.broad, config.abundance)
        if category is None:
            logger.info("Unclassified (no observations in either region): %s", name)
            unclassified.append(name)
            continue

        summary = summarize_phenology(
            bins[name],
            earliest_date=earliest.get(name),
            narrow_region_obs=narrow_flowering[name],
            lower_pct=config.window_lower_pct,
            upper_pct=config.window_upper_pct,
            light_min=config.light_min,
            solid_min=config.solid_min,
            boundary_weeks=config.boundary_weeks,
        )
        if summary is None:
            logger.info("No phenology data (no flowering observations): %s", name)
            no_phenology.append(name)
        elif summary.spans_year_boundary:
            logger.info("Flowering spans the year boundary, window is linear: %s", name)
            boundary.append(name)

        profiles.append(
            SpeciesProfile(
                scientific_name=name,
                genus=genus_of(name),
                family=families.get(name, UNKNOWN_FAMILY),
                common_name=common_names.get(name, ""),
                native=native.native.get(name, False),
                counts=region_counts,
                category=category,
                bins=bins[name],
                phenology=summary,
            )
        )

    return ProfileSet(
        profiles=tuple(profiles),
        unclassified=tuple(unclassified),
        no_phenology=tuple(no_phenology),
        spans_year_boundary=tuple(boundary),
    )
