"""
Prefect flow for building the flowering reports.

Turns the occurrence archive and checklist into the four report documents
plus JSON snapshots of the species summaries, page assignments and run
summary, all under ``data/derived/reports/``.

Run locally:
    python -m flowering_phenology.flows.build
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from flowering_phenology.analysis import (
    FamilyRow,
    ProfileSet,
    SpeciesProfile,
    build_profiles,
    family_overview,
    join_native_status,
)
from flowering_phenology.config import Settings, get_settings
from flowering_phenology.flows.fetch import (
    cached_names,
    load_checklist_entries,
    load_species_occurrences,
    resolve_names,
)
from flowering_phenology.pagination import (
    Page,
    page_assignments,
    plan_family_pages,
    plan_genus_pages,
    plan_rare_pages,
    plan_ridge_pages,
)
from flowering_phenology.renderers.genus_bars import render_genus_bar_pdf
from flowering_phenology.renderers.ridgelines import render_ridge_pdf
from flowering_phenology.renderers.tables import build_family_table_html, build_rare_table_html
from flowering_phenology.schemas import RunSummary
from flowering_phenology.store import DataStore

if TYPE_CHECKING:
    from flowering_phenology.config import PipelineConfig

# Report file names under data/derived/reports/
GENUS_BARS_FILE = "genus_bar_charts.pdf"
RIDGE_PLOTS_FILE = "ridge_plots.pdf"
FAMILY_TABLE_FILE = "family_overview.html"
RARE_TABLE_FILE = "rare_species.html"

# Snapshot paths relative to the store base
SPECIES_SUMMARY_PATH = Path("derived/reports/species_summary.json")
PAGES_PATH = Path("derived/reports/pages.json")
RUN_SUMMARY_PATH = Path("derived/reports/run_summary.json")


@dataclass(frozen=True)
class ReportPlan:
    """Page plans for the four report documents."""

    genus: list[Page[SpeciesProfile]]
    ridge: list[Page[SpeciesProfile]]
    rare: list[Page[SpeciesProfile]]
    family: list[Page[FamilyRow]]


# =============================================================================
# Analysis tasks
# =============================================================================


@task(name="build-profiles", cache_policy=NO_CACHE)
def assemble_profiles(
    occurrences: list[Any],
    checklist: list[Any],
    config: PipelineConfig,
    common_names: dict[str, str],
) -> tuple[ProfileSet, int]:
    """Join native status and build species profiles.

    Returns the profiles and the number of species missing from the checklist.
    """
    species = sorted({occ.scientific_name for occ in occurrences})
    native = join_native_status(species, checklist, native_code=config.native_code)
    return build_profiles(occurrences, native, config, common_names), native.unmatched_count


@task(name="plan-pages", cache_policy=NO_CACHE)
def plan_pages(profiles: ProfileSet, config: PipelineConfig) -> ReportPlan:
    """Paginate each report product."""
    return ReportPlan(
        genus=plan_genus_pages(profiles.profiles, config.genus_page_size),
        ridge=plan_ridge_pages(profiles.profiles, config.ridge_page_size),
        rare=plan_rare_pages(profiles.profiles, config.rare_rows_per_page),
        family=plan_family_pages(family_overview(profiles.profiles), config.family_rows_per_page),
    )


# =============================================================================
# Output tasks
# =============================================================================


def _date_range(config: PipelineConfig) -> str:
    start = config.start_date.isoformat() if config.start_date else "earliest record"
    end = config.end_date.isoformat() if config.end_date else "latest record"
    return f"{start} to {end}"


@task(name="render-reports", cache_policy=NO_CACHE)
def render_reports(plan: ReportPlan, store: DataStore, config: PipelineConfig) -> dict[str, Path]:
    """Write the two PDFs and the two HTML tables."""
    subtitle = f"Observations {_date_range(config)}"
    narrow = ", ".join(config.narrow_regions)

    outputs = {
        "genus_bar_charts": render_genus_bar_pdf(
            plan.genus,
            store.output_path(GENUS_BARS_FILE),
        ),
        "ridge_plots": render_ridge_pdf(
            plan.ridge,
            store.output_path(RIDGE_PLOTS_FILE),
            lower_pct=config.window_lower_pct,
            upper_pct=config.window_upper_pct,
        ),
    }

    family_path = store.output_path(FAMILY_TABLE_FILE)
    family_path.write_text(build_family_table_html(plan.family, subtitle=subtitle))
    outputs["family_overview"] = family_path

    rare_path = store.output_path(RARE_TABLE_FILE)
    rare_path.write_text(
        build_rare_table_html(plan.rare, subtitle=f"Rare in {narrow}; {subtitle.lower()}")
    )
    outputs["rare_species"] = rare_path
    return outputs


def profile_record(profile: SpeciesProfile) -> dict[str, Any]:
    """JSON-ready view of one species profile."""
    record: dict[str, Any] = {
        "scientific_name": profile.scientific_name,
        "common_name": profile.common_name,
        "genus": profile.genus,
        "family": profile.family,
        "native": profile.native,
        "category": profile.category.value,
        "counts": {
            "narrow": profile.counts.narrow,
            "broad": profile.counts.broad,
            "total": profile.counts.total,
        },
        "weeks": {str(b.week): [b.flowering, b.total] for b in profile.bins},
        "phenology": None,
    }
    summary = profile.phenology
    if summary is not None:
        record["phenology"] = {
            "peak_week": round(summary.peak_week, 3),
            "window_start_week": round(summary.window_start_week, 3),
            "window_end_week": round(summary.window_end_week, 3),
            "earliest_date": summary.earliest_date.isoformat(),
            "total_flowering_obs": summary.total_flowering_obs,
            "narrow_region_obs": summary.narrow_region_obs,
            "tier": summary.tier.value,
            "spans_year_boundary": summary.spans_year_boundary,
        }
    return record


@task(name="save-snapshots", cache_policy=NO_CACHE)
def save_snapshots(
    profiles: ProfileSet,
    plan: ReportPlan,
    summary: RunSummary,
    store: DataStore,
) -> None:
    """Write species, page and run-summary snapshots next to the reports."""
    store.write(
        SPECIES_SUMMARY_PATH,
        [profile_record(p) for p in profiles.profiles],
        source="build-reports",
        species=len(profiles.profiles),
    )
    store.write(
        PAGES_PATH,
        {
            "genus_bar_charts": page_assignments(plan.genus),
            "ridge_plots": page_assignments(plan.ridge),
            "rare_species": page_assignments(plan.rare),
            "family_overview": page_assignments(plan.family, key="family"),
        },
        source="build-reports",
    )
    store.write(RUN_SUMMARY_PATH, summary.model_dump(), source="build-reports")


# =============================================================================
# Flow
# =============================================================================


@flow(name="build-reports", log_prints=True)
def build_all(settings: Settings | None = None) -> dict[str, Any]:
    """
    Build every report from the occurrence archive.

    Common names come from iNaturalist when lookups are enabled, otherwise
    from whatever the cache already holds.
    """
    settings = settings or get_settings()
    config = settings.pipeline
    store = DataStore(settings.data_dir)

    print(f"Loading occurrences from {settings.occurrences_path}...")
    if not settings.occurrences_path.exists():
        print("No occurrence file found. Download a GBIF export first.")
        return {"error": "no occurrences"}
    occurrences, report = load_species_occurrences(settings.occurrences_path, config)

    print(f"Loading checklist from {settings.checklist_path}...")
    checklist = load_checklist_entries(settings.checklist_path, config)

    species = sorted({occ.scientific_name for occ in occurrences})
    failures: tuple[str, ...] = ()
    if config.lookup_common_names:
        print(f"Resolving common names for {len(species)} species...")
        lookup = resolve_names(species, store)
        common_names, failures = lookup.names, lookup.failures
    else:
        common_names = cached_names(species, store)

    print("Classifying species and summarizing phenology...")
    profiles, unmatched = assemble_profiles(occurrences, checklist, config, common_names)

    print("Planning pages...")
    plan = plan_pages(profiles, config)

    print("Rendering reports...")
    outputs = render_reports(plan, store, config)

    summary = RunSummary(
        rows_read=report.rows_read,
        rows_kept=report.rows_kept,
        dropped=dict(report.dropped),
        species_total=profiles.species_total,
        species_classified=len(profiles.profiles),
        unclassified=list(profiles.unclassified),
        no_phenology=list(profiles.no_phenology),
        spans_year_boundary=list(profiles.spans_year_boundary),
        checklist_unmatched=unmatched,
        common_name_failures=list(failures),
        outputs={name: str(path) for name, path in outputs.items()},
    )
    save_snapshots(profiles, plan, summary, store)

    for line in summary.lines():
        print(line)
    print(f"Reports written to {store.reports}")
    return {
        "species": summary.species_classified,
        "pages": {
            "genus_bar_charts": len(plan.genus),
            "ridge_plots": len(plan.ridge),
            "rare_species": len(plan.rare),
            "family_overview": len(plan.family),
        },
        "outputs": summary.outputs,
    }


if __name__ == "__main__":
    result = build_all()
    print(f"Flow complete: {result}")
