"""
Application settings and the per-run pipeline configuration.

``Settings`` reads the environment (prefix ``FLOWERING_``, optional ``.env``).
``PipelineConfig`` is the frozen structure handed to every pipeline stage;
nothing downstream reads settings or module globals for thresholds, regions
or page sizes.

Nested values use a double underscore, e.g.::

    FLOWERING_PIPELINE__ABUNDANCE__RARE_MAX=5
    FLOWERING_PIPELINE__NARROW_REGIONS='["Rhode Island"]'
"""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NEW_ENGLAND = (
    "Connecticut",
    "Maine",
    "Massachusetts",
    "New Hampshire",
    "Rhode Island",
    "Vermont",
)


class AbundanceThresholds(BaseModel):
    """Count cut-offs for the abundance categories."""

    model_config = {"frozen": True}

    rare_max: int = Field(default=10, ge=0, description="Max narrow-region count for ct_rare")
    uncommon_max: int = Field(default=100, ge=0, description="Max narrow count for ct_uncommon")
    ne_rare_max: int = Field(default=10, ge=0, description="Max broad-region count for ne_rare")

    @model_validator(mode="after")
    def _check_order(self) -> AbundanceThresholds:
        if self.rare_max >= self.uncommon_max:
            msg = f"rare_max ({self.rare_max}) must be below uncommon_max ({self.uncommon_max})"
            raise ValueError(msg)
        return self


class PipelineConfig(BaseModel):
    """Everything a run needs to turn occurrences into paginated reports."""

    model_config = {"frozen": True}

    # Filters
    start_date: date | None = None
    end_date: date | None = None
    region_column: str = "stateProvince"
    narrow_regions: tuple[str, ...] = ("Connecticut",)
    broad_regions: tuple[str, ...] = NEW_ENGLAND

    # Classification
    abundance: AbundanceThresholds = Field(default_factory=AbundanceThresholds)

    # Phenology statistics
    window_lower_pct: float = Field(default=10.0, gt=0, lt=100)
    window_upper_pct: float = Field(default=90.0, gt=0, lt=100)
    light_min: int = Field(default=5, ge=1, description="Flowering obs for the 'light' tier")
    solid_min: int = Field(default=15, ge=1, description="Flowering obs for the 'solid' tier")
    boundary_weeks: int = Field(default=4, ge=1, le=26)

    # Pagination
    genus_page_size: int = Field(default=9, ge=1)
    ridge_page_size: int = Field(default=25, ge=1)
    rare_rows_per_page: int = Field(default=30, ge=1)
    family_rows_per_page: int = Field(default=40, ge=1)

    # Checklist
    checklist_name_column: str = "scientific_name"
    checklist_status_column: str = "status"
    native_code: str = "N"

    lookup_common_names: bool = True

    @model_validator(mode="after")
    def _check_ranges(self) -> PipelineConfig:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            msg = f"start_date {self.start_date} is after end_date {self.end_date}"
            raise ValueError(msg)
        if self.window_lower_pct >= self.window_upper_pct:
            msg = "window_lower_pct must be below window_upper_pct"
            raise ValueError(msg)
        if self.light_min >= self.solid_min:
            msg = "light_min must be below solid_min"
            raise ValueError(msg)
        if not self.narrow_regions:
            msg = "narrow_regions must name at least one region"
            raise ValueError(msg)
        return self

    @property
    def retained_regions(self) -> frozenset[str]:
        """Regions whose observations survive loading (narrow ∪ broad)."""
        return frozenset(self.narrow_regions) | frozenset(self.broad_regions)


class Settings(BaseSettings):
    """Environment-backed application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWERING_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "flowering-phenology"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")
    occurrences_path: Path = Path("data/raw/occurrences.zip")
    checklist_path: Path = Path("data/raw/checklist.csv")

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read once from the environment)."""
    return Settings()
