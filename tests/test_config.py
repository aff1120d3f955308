"""Tests for settings and pipeline configuration."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from flowering_phenology.config import (
    NEW_ENGLAND,
    AbundanceThresholds,
    PipelineConfig,
    Settings,
    get_settings,
)


class TestPipelineConfig:
    """Defaults and validation of the per-run configuration."""

    def test_defaults(self) -> None:
        config = PipelineConfig()
        assert config.narrow_regions == ("Connecticut",)
        assert config.broad_regions == NEW_ENGLAND
        assert config.abundance == AbundanceThresholds(rare_max=10, uncommon_max=100)
        assert (config.window_lower_pct, config.window_upper_pct) == (10.0, 90.0)
        assert (config.light_min, config.solid_min) == (5, 15)
        assert config.genus_page_size == 9

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig().genus_page_size = 12  # type: ignore[misc]

    def test_retained_regions(self) -> None:
        config = PipelineConfig(narrow_regions=("Quebec",), broad_regions=("Maine",))
        assert config.retained_regions == frozenset({"Quebec", "Maine"})

    def test_date_order(self) -> None:
        with pytest.raises(ValidationError, match="after end_date"):
            PipelineConfig(start_date=date(2024, 1, 1), end_date=date(2020, 1, 1))

    def test_percentile_order(self) -> None:
        with pytest.raises(ValidationError, match="window_lower_pct"):
            PipelineConfig(window_lower_pct=90, window_upper_pct=10)

    def test_tier_order(self) -> None:
        with pytest.raises(ValidationError, match="light_min"):
            PipelineConfig(light_min=20, solid_min=15)

    def test_narrow_regions_required(self) -> None:
        with pytest.raises(ValidationError, match="narrow_regions"):
            PipelineConfig(narrow_regions=())

    def test_page_size_positive(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(ridge_page_size=0)


class TestSettings:
    """Environment-backed settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        settings = Settings()
        assert settings.app_name == "flowering-phenology"
        assert settings.data_dir == Path("data")
        assert settings.occurrences_path == Path("data/raw/occurrences.zip")

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FLOWERING_DATA_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("FLOWERING_DEBUG", "true")
        settings = Settings()
        assert settings.data_dir == tmp_path / "store"
        assert settings.debug is True

    def test_nested_pipeline_values(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FLOWERING_PIPELINE__ABUNDANCE__RARE_MAX", "5")
        monkeypatch.setenv("FLOWERING_PIPELINE__NARROW_REGIONS", '["Rhode Island"]')
        config = Settings().pipeline
        assert config.abundance.rare_max == 5
        assert config.narrow_regions == ("Rhode Island",)

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
