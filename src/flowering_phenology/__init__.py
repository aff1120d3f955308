"""Flowering Phenology - flowering timing and abundance reports for a regional flora.

Architecture::

    datasources/   Inputs (Darwin Core occurrences, native checklist, iNaturalist names)
    store.py       Tiered JSON store (raw → reference → derived)
    analysis/      Pure domain logic (taxonomy, abundance, native status, phenology)
    pagination.py  Page planning for each output product
    renderers/     Pages → documents (matplotlib PDFs, Jinja2 HTML tables)
    flows/         Prefect orchestration (fetch resolves names, build renders reports)
    services/      Shared utilities (HTTP client with retry)

Data flow: datasources → analysis → pagination → renderers → derived/reports/

Configuration lives in ``config.py``: environment-backed ``Settings`` and the
frozen ``PipelineConfig`` that every stage receives explicitly.
"""

__version__ = "0.1.0"
__author__ = "Michael Howden"

from flowering_phenology.config import PipelineConfig, Settings
from flowering_phenology.schemas import AbundanceCategory, DataQualityTier

__all__ = ["AbundanceCategory", "DataQualityTier", "PipelineConfig", "Settings", "__version__"]
