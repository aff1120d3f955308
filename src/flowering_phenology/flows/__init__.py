"""
Prefect flows for the report pipeline.

Flows:
- fetch: Load inputs and resolve common names (the only network step)
- build: Classify, summarize, paginate and render the four reports

Usage (local):
    python -m flowering_phenology.flows.fetch
    python -m flowering_phenology.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    python -m flowering_phenology.flows.build
"""
