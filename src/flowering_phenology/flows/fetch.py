"""
Prefect tasks and flow for pipeline inputs.

Loads the occurrence archive and the checklist, and resolves common names
through the cached iNaturalist lookup. The build flow reuses these tasks.

Run locally:
    python -m flowering_phenology.flows.fetch
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from flowering_phenology.analysis.taxonomy import normalize_occurrences
from flowering_phenology.config import Settings, get_settings
from flowering_phenology.datasources.checklist import ChecklistEntry, load_checklist
from flowering_phenology.datasources.inaturalist import (
    CommonNameCache,
    LookupResult,
    resolve_common_names,
)
from flowering_phenology.datasources.occurrences import (
    LoadReport,
    Occurrence,
    load_occurrences,
)
from flowering_phenology.store import DataStore

if TYPE_CHECKING:
    from pathlib import Path

    from flowering_phenology.config import PipelineConfig


@task(name="load-occurrences", cache_policy=NO_CACHE)
def load_species_occurrences(
    path: Path,
    config: PipelineConfig,
) -> tuple[list[Occurrence], LoadReport]:
    """Load, filter and normalize occurrences to species level."""
    occurrences, report = load_occurrences(path, config)
    normalized, not_species = normalize_occurrences(occurrences)
    report.drop("not_species_level", not_species)
    report.rows_kept = len(normalized)
    return normalized, report


@task(name="load-checklist", cache_policy=NO_CACHE)
def load_checklist_entries(path: Path, config: PipelineConfig) -> list[ChecklistEntry]:
    """Load the native checklist; an absent file yields no entries."""
    if not path.exists():
        print(f"Warning: No checklist at {path}. Every species will be treated as non-native.")
        return []
    return load_checklist(
        path,
        name_column=config.checklist_name_column,
        status_column=config.checklist_status_column,
    )


@task(name="resolve-common-names", cache_policy=NO_CACHE)
def resolve_names(species: list[str], store: DataStore) -> LookupResult:
    """Resolve common names: cache first, then iNaturalist for the rest."""
    cache = CommonNameCache(store)
    print(f"Common-name cache holds {len(cache)} entries")
    return resolve_common_names(species, cache)


@task(name="cached-common-names", cache_policy=NO_CACHE)
def cached_names(species: list[str], store: DataStore) -> dict[str, str]:
    """Common names from the cache only; unknown species stay blank."""
    cache = CommonNameCache(store)
    return {name: cache.get(name) or "" for name in species}


@flow(name="fetch-common-names", log_prints=True)
def fetch_all(settings: Settings | None = None) -> dict[str, Any]:
    """
    Resolve common names for every species in the occurrence archive.

    Safe to interrupt: each resolved name is already in the cache.
    """
    settings = settings or get_settings()
    store = DataStore(settings.data_dir)

    if not settings.occurrences_path.exists():
        print(f"No occurrence file at {settings.occurrences_path}.")
        return {"error": "no occurrences"}

    print(f"Loading occurrences from {settings.occurrences_path}...")
    occurrences, report = load_species_occurrences(settings.occurrences_path, settings.pipeline)
    species = sorted({occ.scientific_name for occ in occurrences})
    print(f"{report.rows_kept:,} occurrences, {len(species)} species")

    result = resolve_names(species, store)
    print(f"Fetched {result.fetched} new names; {len(result.failures)} lookups failed")
    return {
        "species": len(species),
        "fetched": result.fetched,
        "failures": list(result.failures),
    }


if __name__ == "__main__":
    outcome = fetch_all()
    print(f"Flow complete: {outcome}")
