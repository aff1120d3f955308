"""Pipeline inputs.

Each subdirectory is one source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── models.py         # Frozen dataclasses for parsed records (optional)
    └── {feature}.py      # Load/fetch functions (one per file format or endpoint)

Sources:
  - occurrences/  Darwin Core Archive or CSV/TSV export (read with pandas)
  - checklist/    Regional native-species checklist (CSV)
  - inaturalist/  Common-name lookup against the iNaturalist taxa API, cached

Loaders raise ``FileNotFoundError`` for missing inputs and ``ValueError`` for
missing required columns. Row-level problems are counted, never raised.
"""
