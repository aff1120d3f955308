"""Darwin Core occurrence records.

Public API:
  - models: Occurrence, LoadReport
  - annotations: is_flowering, FLOWERING_TERMS
  - archive: load_occurrences, read_occurrence_frames
"""

from flowering_phenology.datasources.occurrences.annotations import (
    FLOWERING_TERMS,
    is_flowering,
)
from flowering_phenology.datasources.occurrences.archive import (
    load_occurrences,
    read_occurrence_frames,
)
from flowering_phenology.datasources.occurrences.models import LoadReport, Occurrence

__all__ = [
    "FLOWERING_TERMS",
    "LoadReport",
    "Occurrence",
    "is_flowering",
    "load_occurrences",
    "read_occurrence_frames",
]
