"""Cached common-name resolution.

Cache layout (``reference/common_names.json`` in the data store)::

    {"meta": {...}, "data": {"Acer rubrum": {"common_name": "red maple",
                                             "resolved_at": "2026-04-01T..."}}}

An empty ``common_name`` records a successful lookup that found no English
name, so the species is not queried again until the entry ages out. Failed
lookups are never cached.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import requests

from flowering_phenology.datasources.inaturalist import client

if TYPE_CHECKING:
    from flowering_phenology.store import DataStore

logger = logging.getLogger(__name__)

COMMON_NAMES_PATH = Path("reference/common_names.json")
CACHE_TTL = timedelta(days=90)


class CommonNameCache:
    """Scientific name → common name mapping persisted in the data store."""

    def __init__(
        self,
        store: DataStore,
        path: Path = COMMON_NAMES_PATH,
        ttl: timedelta = CACHE_TTL,
    ) -> None:
        self.store = store
        self.path = path
        self.ttl = ttl
        self._entries: dict[str, dict[str, Any]] = store.read(path) or {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, scientific_name: str) -> str | None:
        """Cached common name ("" if known to have none), or None if unknown/stale."""
        entry = self._entries.get(scientific_name)
        if entry is None:
            return None
        resolved_at = datetime.fromisoformat(entry["resolved_at"])
        if resolved_at.tzinfo is None:
            resolved_at = resolved_at.replace(tzinfo=UTC)
        if datetime.now(UTC) - resolved_at > self.ttl:
            return None
        return str(entry.get("common_name") or "")

    def set(self, scientific_name: str, common_name: str) -> None:
        """Record a successful lookup and persist the cache immediately."""
        self._entries[scientific_name] = {
            "common_name": common_name,
            "resolved_at": datetime.now(UTC).isoformat(),
        }
        self.store.write(self.path, self._entries, source="inaturalist.org")


@dataclass(frozen=True)
class LookupResult:
    """Outcome of resolving a batch of species names."""

    names: dict[str, str]
    fetched: int
    failures: tuple[str, ...]


def lookup_common_name(scientific_name: str) -> str:
    """
    Resolve one species' English common name from iNaturalist.

    Only an exact (case-insensitive) scientific-name match is accepted, so a
    search for "Carex lurida" never returns the name of "Carex lupulina".

    Returns:
        The preferred common name, or "" if the taxon has none or isn't found.

    Raises:
        requests.RequestException: On network errors or HTTP error status
            after the session's retries are exhausted.
    """
    wanted = scientific_name.casefold()
    for taxon in client.search_taxa(scientific_name):
        if str(taxon.get("name", "")).casefold() == wanted:
            return str(taxon.get("preferred_common_name") or "")
    return ""


def resolve_common_names(
    species: Iterable[str],
    cache: CommonNameCache,
    *,
    lookup: Callable[[str], str] = lookup_common_name,
) -> LookupResult:
    """
    Resolve common names, consulting the cache before any network call.

    Each successful lookup is written to the cache straight away so an
    interrupted run keeps what it already fetched. A failed lookup leaves the
    name blank and the run continues.
    """
    names: dict[str, str] = {}
    failures: list[str] = []
    fetched = 0
    for name in species:
        cached = cache.get(name)
        if cached is not None:
            names[name] = cached
            continue
        try:
            common = lookup(name)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Common-name lookup failed for %s: %s", name, exc)
            failures.append(name)
            names[name] = ""
            continue
        cache.set(name, common)
        names[name] = common
        fetched += 1
        logger.debug("Resolved %s -> %r", name, common)
    return LookupResult(names=names, fetched=fetched, failures=tuple(failures))
