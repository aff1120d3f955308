"""Flowering phenology statistics.

Weeks are calendar bins, not ISO weeks: day-of-year 1-7 is week 1, 8-14 is
week 2, and so on, with days 358-366 folded into week 52. Bin boundaries are
therefore the same in leap and common years, and every year has exactly 52
weeks.

Per species the engine derives:
  - peak week: flowering-weighted mean week ("center of mass")
  - duration window: the weeks bounding the central mass of flowering
    (10th-90th percentile by default)
  - earliest flowering date across all retained years
  - a data-quality tier from the number of flowering observations

The window is computed on a linear week axis. A species whose flowering sits
at both ends of the year (e.g. weeks 1-2 and 51-52) is not wrapped; it is
flagged with ``spans_year_boundary`` instead so reports can call it out.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flowering_phenology.schemas import DataQualityTier

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from flowering_phenology.datasources.occurrences import Occurrence

WEEKS_PER_YEAR = 52


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True)
class WeeklyBin:
    """Observation counts for one species in one calendar week, all years summed."""

    week: int
    flowering: int
    total: int


@dataclass(frozen=True)
class PhenologySummary:
    """Flowering statistics for a species with at least one flowering record."""

    peak_week: float
    window_start_week: float
    window_end_week: float
    earliest_date: date
    total_flowering_obs: int
    narrow_region_obs: int
    tier: DataQualityTier
    spans_year_boundary: bool = False

    @property
    def duration_weeks(self) -> float:
        return self.window_end_week - self.window_start_week


# =============================================================================
# Binning
# =============================================================================


def week_of_year(d: date) -> int:
    """Calendar week bin (1-52) for a date."""
    day = d.timetuple().tm_yday
    return min(WEEKS_PER_YEAR, (day - 1) // 7 + 1)


def weekly_bins(occurrences: Iterable[Occurrence]) -> dict[str, tuple[WeeklyBin, ...]]:
    """Bin occurrences by species and week.

    Only weeks with at least one observation are returned, sorted by week.
    """
    flowering: dict[str, defaultdict[int, int]] = {}
    total: dict[str, defaultdict[int, int]] = {}
    for occ in occurrences:
        week = week_of_year(occ.event_date)
        name = occ.scientific_name
        total.setdefault(name, defaultdict(int))[week] += 1
        by_week = flowering.setdefault(name, defaultdict(int))
        if occ.flowering:
            by_week[week] += 1

    return {
        name: tuple(
            WeeklyBin(week=w, flowering=flowering[name][w], total=weeks[w])
            for w in sorted(weeks)
        )
        for name, weeks in sorted(total.items())
    }


def earliest_flowering_dates(occurrences: Iterable[Occurrence]) -> dict[str, date]:
    """Earliest flowering event date per species; ties go to the first-loaded record."""
    earliest: dict[str, tuple[date, int]] = {}
    for occ in occurrences:
        if not occ.flowering:
            continue
        candidate = (occ.event_date, occ.seq)
        current = earliest.get(occ.scientific_name)
        if current is None or candidate < current:
            earliest[occ.scientific_name] = candidate
    return {name: value[0] for name, value in earliest.items()}


def _flowering_by_week(bins: Iterable[WeeklyBin]) -> list[tuple[int, int]]:
    """Validate bins and merge them into sorted (week, flowering) pairs with weight > 0."""
    merged: dict[int, int] = defaultdict(int)
    for b in bins:
        if not 1 <= b.week <= WEEKS_PER_YEAR:
            msg = f"Week {b.week} is outside 1-{WEEKS_PER_YEAR}"
            raise ValueError(msg)
        if b.flowering < 0 or b.total < 0:
            msg = f"Negative count in week {b.week}"
            raise ValueError(msg)
        merged[b.week] += b.flowering
    return [(w, c) for w, c in sorted(merged.items()) if c > 0]


# =============================================================================
# Statistics
# =============================================================================


def peak_week(bins: Iterable[WeeklyBin]) -> float | None:
    """Flowering-weighted mean week, or None when there is no flowering."""
    weighted = _flowering_by_week(bins)
    mass = sum(c for _, c in weighted)
    if mass == 0:
        return None
    return sum(w * c for w, c in weighted) / mass


def _percentile_week(weighted: list[tuple[int, int]], pct: float) -> float:
    """Week where cumulative flowering mass crosses ``pct`` percent.

    Each week's mass is spread evenly over ``[week - 0.5, week + 0.5]``, so
    the crossing point is a linear interpolation between adjacent bin edges.
    """
    mass = sum(c for _, c in weighted)
    target = mass * pct / 100.0
    cumulative = 0
    for week, count in weighted:
        if cumulative + count >= target:
            return (week - 0.5) + (target - cumulative) / count
        cumulative += count
    return weighted[-1][0] + 0.5


def duration_window(
    bins: Iterable[WeeklyBin],
    lower_pct: float = 10.0,
    upper_pct: float = 90.0,
) -> tuple[float, float] | None:
    """
    Weeks bounding the central flowering mass.

    For flowering spread evenly across weeks 1-52 this returns
    ``(5.7, 47.3)``; a single flowering week ``w`` gives a window inside
    ``(w - 0.5, w + 0.5)``.

    Returns:
        ``(start, end)``, or None when there is no flowering.

    Raises:
        ValueError: If the percentiles are not ``0 < lower < upper < 100``.
    """
    if not 0 < lower_pct < upper_pct < 100:
        msg = f"Invalid percentile bounds: {lower_pct}, {upper_pct}"
        raise ValueError(msg)
    weighted = _flowering_by_week(bins)
    if not weighted:
        return None
    return _percentile_week(weighted, lower_pct), _percentile_week(weighted, upper_pct)


def spans_year_boundary(bins: Iterable[WeeklyBin], boundary_weeks: int = 4) -> bool:
    """True when flowering falls in both the first and the last ``boundary_weeks`` weeks."""
    weeks = {w for w, _ in _flowering_by_week(bins)}
    early = any(w <= boundary_weeks for w in weeks)
    late = any(w > WEEKS_PER_YEAR - boundary_weeks for w in weeks)
    return early and late


def quality_tier(flowering_obs: int, light_min: int = 5, solid_min: int = 15) -> DataQualityTier:
    """Tier that tells renderers how much to draw for a species."""
    if flowering_obs >= solid_min:
        return DataQualityTier.SOLID
    if flowering_obs >= light_min:
        return DataQualityTier.LIGHT
    return DataQualityTier.POINTS_ONLY


def summarize_phenology(
    bins: Iterable[WeeklyBin],
    *,
    earliest_date: date | None,
    narrow_region_obs: int,
    lower_pct: float = 10.0,
    upper_pct: float = 90.0,
    light_min: int = 5,
    solid_min: int = 15,
    boundary_weeks: int = 4,
) -> PhenologySummary | None:
    """
    Build the phenology summary for one species.

    Returns None when the species has no flowering observations; such species
    stay in the abundance outputs but are left out of the ridge plots and the
    rare-species table.
    """
    bins = tuple(bins)
    peak = peak_week(bins)
    window = duration_window(bins, lower_pct, upper_pct)
    if peak is None or window is None or earliest_date is None:
        return None
    flowering_obs = sum(b.flowering for b in bins)
    return PhenologySummary(
        peak_week=peak,
        window_start_week=window[0],
        window_end_week=window[1],
        earliest_date=earliest_date,
        total_flowering_obs=flowering_obs,
        narrow_region_obs=narrow_region_obs,
        tier=quality_tier(flowering_obs, light_min, solid_min),
        spans_year_boundary=spans_year_boundary(bins, boundary_weeks),
    )
