"""Category colors shared by the chart and table renderers."""

from __future__ import annotations

from flowering_phenology.schemas import AbundanceCategory

CATEGORY_COLORS: dict[AbundanceCategory, str] = {
    AbundanceCategory.CT_COMMON: "#3cb44b",  # green
    AbundanceCategory.CT_UNCOMMON: "#4363d8",  # blue
    AbundanceCategory.CT_RARE: "#e6194b",  # red
    AbundanceCategory.NE_ONLY: "#f58231",  # orange
    AbundanceCategory.NE_RARE: "#911eb4",  # purple
}

#: Bars for all observations (flowering or not) sit behind the flowering bars.
ALL_OBSERVATIONS_COLOR = "#d9d9d9"

NATIVE_EDGE_COLOR = "#222222"
INTRODUCED_EDGE_COLOR = "#888888"


def category_color(category: AbundanceCategory) -> str:
    return CATEGORY_COLORS[category]
