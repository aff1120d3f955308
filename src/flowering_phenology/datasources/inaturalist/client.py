"""
iNaturalist API client.

Only the taxa search is used: it maps a scientific name to the taxon's
preferred English common name.

API docs: https://api.inaturalist.org/v1/docs/
Rate limits: ~1 req/sec, 10k/day
Recommended practices: https://www.inaturalist.org/pages/api+recommended+practices
"""

from __future__ import annotations

from typing import Any

from flowering_phenology.services.http import RateLimiter, get_json

API_BASE = "https://api.inaturalist.org/v1"
PLANTAE = 47126  # kingdom Plantae

MIN_REQUEST_INTERVAL = 1.1  # seconds
limiter = RateLimiter(MIN_REQUEST_INTERVAL)


def search_taxa(name: str, *, rank: str = "species", per_page: int = 10) -> list[dict[str, Any]]:
    """GET /taxa: active plant taxa matching ``name`` at the given rank."""
    params: dict[str, Any] = {
        "q": name,
        "rank": rank,
        "taxon_id": PLANTAE,
        "is_active": "true",
        "locale": "en",
        "per_page": per_page,
    }
    payload = get_json(f"{API_BASE}/taxa", params, limiter=limiter)
    results: list[dict[str, Any]] = payload.get("results", [])
    return results
