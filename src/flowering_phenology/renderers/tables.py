"""Family overview and rare-species tables (paginated HTML).

Each planned page becomes a ``<section class="page">`` that breaks onto its
own sheet when printed. Row dicts are built here so templates only format.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flowering_phenology.renderers import render_template
from flowering_phenology.renderers.palette import category_color
from flowering_phenology.renderers.week_labels import week_label, window_label
from flowering_phenology.schemas import CATEGORY_ORDER

if TYPE_CHECKING:
    from flowering_phenology.analysis.family_overview import FamilyRow
    from flowering_phenology.analysis.profiles import SpeciesProfile
    from flowering_phenology.pagination import Page


def _family_row(row: FamilyRow) -> dict[str, Any]:
    return {
        "family": row.family,
        "counts": [row.count(cat) for cat in CATEGORY_ORDER],
        "species": row.species,
        "native_species": row.native_species,
        "with_phenology": row.with_phenology,
        "observations": row.observations,
    }


def build_family_table_html(
    pages: list[Page[FamilyRow]],
    *,
    title: str = "Family overview",
    subtitle: str = "",
) -> str:
    """Render the per-family species counts, one section per page."""
    page_rows = [[_family_row(r) for r in page.items] for page in pages]
    all_rows = [r for rows in page_rows for r in rows]
    totals = [sum(r["counts"][i] for r in all_rows) for i in range(len(CATEGORY_ORDER))]
    return render_template(
        "family_table.html.j2",
        title=title,
        subtitle=subtitle,
        categories=[
            {"label": cat.label, "code": cat.value, "color": category_color(cat)}
            for cat in CATEGORY_ORDER
        ],
        pages=page_rows,
        totals=totals,
        species_total=sum(r["species"] for r in all_rows),
    )


def _rare_row(profile: SpeciesProfile) -> dict[str, Any]:
    summary = profile.phenology
    if summary is None:
        msg = f"{profile.scientific_name} has no phenology summary"
        raise ValueError(msg)
    return {
        "scientific_name": profile.scientific_name,
        "common_name": profile.common_name,
        "family": profile.family,
        "native": profile.native,
        "narrow_obs": profile.counts.narrow,
        "flowering_obs": summary.total_flowering_obs,
        "narrow_flowering_obs": summary.narrow_region_obs,
        "peak": week_label(summary.peak_week),
        "window": window_label(summary.window_start_week, summary.window_end_week),
        "earliest": summary.earliest_date.isoformat(),
        "tier": summary.tier.value,
        "spans_year_boundary": summary.spans_year_boundary,
    }


def build_rare_table_html(
    pages: list[Page[SpeciesProfile]],
    *,
    title: str = "Rare species flowering calendar",
    subtitle: str = "",
) -> str:
    """Render rare species in peak-week order, split at page boundaries."""
    return render_template(
        "rare_table.html.j2",
        title=title,
        subtitle=subtitle,
        pages=[[_rare_row(p) for p in page.items] for page in pages],
    )
