"""Ridge density plots of flowering time (PDF).

Species are stacked top to bottom in page order (earliest peak first). How
much is drawn depends on the data-quality tier:

  - solid: filled, smoothed density
  - light: dashed density outline plus the raw weekly points
  - points-only: raw weekly points only

Every ridge marks the peak week and the duration window. Species whose
flowering touches both ends of the year get a dagger after their name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.backends.backend_pdf import PdfPages

from flowering_phenology.analysis.phenology import WEEKS_PER_YEAR
from flowering_phenology.renderers.figures import PAGE_SIZE_IN, empty_figure
from flowering_phenology.renderers.palette import category_color
from flowering_phenology.renderers.week_labels import MONTH_START_WEEKS
from flowering_phenology.schemas import DataQualityTier

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from flowering_phenology.analysis.phenology import WeeklyBin
    from flowering_phenology.analysis.profiles import SpeciesProfile
    from flowering_phenology.pagination import Page

RIDGE_OVERLAP = 1.6  # ridge height in row units
BANDWIDTH_WEEKS = 1.5
GRID = np.linspace(0.5, WEEKS_PER_YEAR + 0.5, 521)


def ridge_density(
    bins: Iterable[WeeklyBin],
    grid: np.ndarray = GRID,
    bandwidth: float = BANDWIDTH_WEEKS,
) -> np.ndarray:
    """Gaussian-smoothed flowering density on ``grid``, scaled to a peak of 1.

    Returns zeros when there is no flowering.
    """
    weeks = np.array([b.week for b in bins if b.flowering > 0], dtype=float)
    weights = np.array([b.flowering for b in bins if b.flowering > 0], dtype=float)
    if weights.size == 0:
        return np.zeros_like(grid)
    z = (grid[:, None] - weeks[None, :]) / bandwidth
    density = (np.exp(-0.5 * z**2) * weights[None, :]).sum(axis=1)
    return density / density.max()


def _draw_ridge(ax: Axes, profile: SpeciesProfile, baseline: float) -> None:
    summary = profile.phenology
    if summary is None:
        return
    color = category_color(profile.category)
    tier = summary.tier

    if tier is not DataQualityTier.POINTS_ONLY:
        curve = baseline + ridge_density(profile.bins) * RIDGE_OVERLAP
        if tier is DataQualityTier.SOLID:
            ax.fill_between(GRID, baseline, curve, color=color, alpha=0.6, linewidth=0)
            ax.plot(GRID, curve, color="black", linewidth=0.5)
        else:
            ax.plot(GRID, curve, color=color, linewidth=1.0, linestyle="--")

    if tier is not DataQualityTier.SOLID:
        flowering = [b for b in profile.bins if b.flowering > 0]
        top = max(b.flowering for b in flowering)
        ax.scatter(
            [b.week for b in flowering],
            [baseline + 0.15] * len(flowering),
            s=[12 + 30 * b.flowering / top for b in flowering],
            color=color,
            edgecolor="black",
            linewidth=0.3,
            zorder=3,
        )

    ax.hlines(
        baseline - 0.12,
        summary.window_start_week,
        summary.window_end_week,
        color=color,
        linewidth=2.0,
    )
    ax.plot([summary.peak_week], [baseline - 0.12], marker="|", color="black", markersize=8)


def _page_figure(
    page: Page[SpeciesProfile],
    total_pages: int,
    title: str,
    window_note: str,
) -> Figure:
    items = page.items
    fig, ax = plt.subplots(figsize=PAGE_SIZE_IN)
    n = len(items)
    labels = []
    # First-ranked species on top
    for i, profile in enumerate(items):
        baseline = float(n - 1 - i)
        _draw_ridge(ax, profile, baseline)
        label = profile.scientific_name
        if profile.phenology is not None and profile.phenology.spans_year_boundary:
            label += " †"
        labels.append((baseline, label))

    ax.set_yticks([b for b, _ in labels])
    ax.set_yticklabels([lab for _, lab in labels], fontsize=7, fontstyle="italic")
    ax.set_ylim(-0.6, n - 1 + RIDGE_OVERLAP + 0.2)
    ax.set_xlim(0.5, WEEKS_PER_YEAR + 0.5)
    ax.set_xticks([w for w, _ in MONTH_START_WEEKS])
    ax.set_xticklabels([m for _, m in MONTH_START_WEEKS], fontsize=8)
    ax.grid(axis="x", color="#eeeeee", linewidth=0.5)
    for side in ("top", "right", "left"):
        ax.spines[side].set_visible(False)

    fig.suptitle(f"{title} (page {page.number} of {total_pages})", fontsize=12)
    fig.text(0.5, 0.015, window_note, ha="center", fontsize=7)
    fig.tight_layout(rect=(0, 0.03, 1, 0.96))
    return fig


def render_ridge_pdf(
    pages: list[Page[SpeciesProfile]],
    output_path: Path,
    *,
    title: str = "Flowering time of native species",
    lower_pct: float = 10.0,
    upper_pct: float = 90.0,
) -> Path:
    """
    Write the ridge-plot document.

    Args:
        pages: Pages from ``plan_ridge_pages``.
        output_path: Destination PDF.
        title: Page heading.
        lower_pct: Lower window percentile, for the footnote.
        upper_pct: Upper window percentile, for the footnote.

    Returns:
        ``output_path``.
    """
    note = (
        f"Bar: {lower_pct:g}th-{upper_pct:g}th percentile of flowering observations; "
        "tick: peak week. † flowering at both ends of the year (window not wrapped)."
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with PdfPages(output_path) as pdf:
        if not pages:
            fig = empty_figure(title)
            pdf.savefig(fig)
            plt.close(fig)
            return output_path
        for page in pages:
            fig = _page_figure(page, len(pages), title, note)
            pdf.savefig(fig)
            plt.close(fig)
    return output_path
