"""Domain logic: taxonomy, abundance, native status, phenology, profiles.

Everything here is pure: no I/O, no HTTP, no Prefect decorators. Thresholds
and region lists come in as arguments (usually pieces of ``PipelineConfig``),
never from module globals.

Dependency rule: analysis/ imports datasource *models* only.

Modules:
  - taxonomy: infraspecific names -> species level, genus, join keys
  - abundance: region counts -> AbundanceCategory
  - native_status: species x checklist -> native flags + unmatched count
  - phenology: occurrences -> weekly bins -> PhenologySummary
  - profiles: everything above -> one SpeciesProfile per species
  - family_overview: profiles -> per-family category counts
"""

from flowering_phenology.analysis.abundance import (
    RegionCounts,
    classify_abundance,
    count_by_region,
)
from flowering_phenology.analysis.family_overview import FamilyRow, family_overview
from flowering_phenology.analysis.native_status import NativeJoin, join_native_status
from flowering_phenology.analysis.phenology import (
    WEEKS_PER_YEAR,
    PhenologySummary,
    WeeklyBin,
    duration_window,
    peak_week,
    quality_tier,
    summarize_phenology,
    week_of_year,
    weekly_bins,
)
from flowering_phenology.analysis.profiles import (
    UNKNOWN_FAMILY,
    ProfileSet,
    SpeciesProfile,
    build_profiles,
)
from flowering_phenology.analysis.taxonomy import (
    genus_of,
    name_key,
    normalize_occurrences,
    species_name,
)

__all__ = [
    "UNKNOWN_FAMILY",
    "WEEKS_PER_YEAR",
    "FamilyRow",
    "NativeJoin",
    "PhenologySummary",
    "ProfileSet",
    "RegionCounts",
    "SpeciesProfile",
    "WeeklyBin",
    "build_profiles",
    "classify_abundance",
    "count_by_region",
    "duration_window",
    "family_overview",
    "genus_of",
    "join_native_status",
    "name_key",
    "normalize_occurrences",
    "peak_week",
    "quality_tier",
    "species_name",
    "summarize_phenology",
    "week_of_year",
    "weekly_bins",
]
