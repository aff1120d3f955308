"""iNaturalist common-name lookup.

Resolves English common names for species through the iNaturalist taxa
endpoint. Lookups go through a JSON cache in the data store's reference tier;
the network is only touched for names the cache doesn't know (or has aged
out).

Public API:
  - client: Low-level HTTP (rate-limited)
  - common_names: CommonNameCache, LookupResult, lookup_common_name,
    resolve_common_names
"""

from flowering_phenology.datasources.inaturalist.common_names import (
    COMMON_NAMES_PATH,
    CommonNameCache,
    LookupResult,
    lookup_common_name,
    resolve_common_names,
)

__all__ = [
    "COMMON_NAMES_PATH",
    "CommonNameCache",
    "LookupResult",
    "lookup_common_name",
    "resolve_common_names",
]
