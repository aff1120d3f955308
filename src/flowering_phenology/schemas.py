"""
Domain enums and run-level result models.

Record types that flow between pipeline stages are frozen dataclasses that
live next to the code producing them (``datasources/*/models.py``,
``analysis/``). This module holds the shared vocabulary and the pydantic
models that get serialized at the end of a run.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

# =============================================================================
# Classification vocabulary
# =============================================================================


class AbundanceCategory(StrEnum):
    """Ordinal abundance class from narrow- and broad-region counts."""

    CT_COMMON = "ct_common"
    CT_UNCOMMON = "ct_uncommon"
    CT_RARE = "ct_rare"
    NE_ONLY = "ne_only"
    NE_RARE = "ne_rare"

    @property
    def label(self) -> str:
        """Short human label used in document legends."""
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    AbundanceCategory.CT_COMMON: "Common in region",
    AbundanceCategory.CT_UNCOMMON: "Uncommon in region",
    AbundanceCategory.CT_RARE: "Rare in region",
    AbundanceCategory.NE_ONLY: "Only in broader area",
    AbundanceCategory.NE_RARE: "Rare in broader area",
}

#: Display order for tables and legends (most to least locally abundant).
CATEGORY_ORDER: tuple[AbundanceCategory, ...] = tuple(AbundanceCategory)


class DataQualityTier(StrEnum):
    """How much flowering data backs a species' phenology summary."""

    SOLID = "solid"
    LIGHT = "light"
    POINTS_ONLY = "points-only"


# =============================================================================
# Run results
# =============================================================================


class RunSummary(BaseModel):
    """Data-quality counters and exclusions collected across one pipeline run."""

    rows_read: int = 0
    rows_kept: int = 0
    dropped: dict[str, int] = Field(default_factory=dict)
    species_total: int = 0
    species_classified: int = 0
    unclassified: list[str] = Field(default_factory=list)
    no_phenology: list[str] = Field(default_factory=list)
    spans_year_boundary: list[str] = Field(default_factory=list)
    checklist_unmatched: int = 0
    common_name_failures: list[str] = Field(default_factory=list)
    outputs: dict[str, str] = Field(default_factory=dict)

    def lines(self) -> list[str]:
        """Human-readable summary lines for printing at the end of a run."""
        out = [
            f"Rows read: {self.rows_read:,} (kept {self.rows_kept:,})",
        ]
        for reason, count in sorted(self.dropped.items()):
            out.append(f"  dropped ({reason}): {count:,}")
        out.append(f"Species: {self.species_total} ({self.species_classified} classified)")
        out.append(f"Unclassified (no observations in either region): {len(self.unclassified)}")
        out.append(f"No phenology data (no flowering observations): {len(self.no_phenology)}")
        if self.spans_year_boundary:
            out.append(f"Flowering spans the year boundary: {len(self.spans_year_boundary)}")
        out.append(f"Checklist misses (treated as non-native): {self.checklist_unmatched}")
        if self.common_name_failures:
            out.append(f"Common-name lookup failures: {len(self.common_name_failures)}")
        return out

