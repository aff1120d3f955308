"""Genus-faceted weekly bar charts (PDF).

One panel per species: grey bars for all observations per week, colored
bars for flowering observations in the species' abundance-category color.
Panels follow the page's genus groups; the first panel of each group carries
the genus header, repeated with "(continued)" when a genus spills over.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.patches import Patch

from flowering_phenology.analysis.phenology import WEEKS_PER_YEAR
from flowering_phenology.renderers.figures import PAGE_SIZE_IN, empty_figure
from flowering_phenology.renderers.palette import (
    ALL_OBSERVATIONS_COLOR,
    CATEGORY_COLORS,
    INTRODUCED_EDGE_COLOR,
    NATIVE_EDGE_COLOR,
    category_color,
)
from flowering_phenology.renderers.week_labels import MONTH_START_WEEKS

if TYPE_CHECKING:
    from pathlib import Path

    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    from flowering_phenology.analysis.profiles import SpeciesProfile
    from flowering_phenology.pagination import Page

def _draw_species_panel(ax: Axes, profile: SpeciesProfile, header: str | None) -> None:
    weeks = list(range(1, WEEKS_PER_YEAR + 1))
    totals = dict.fromkeys(weeks, 0)
    flowering = dict.fromkeys(weeks, 0)
    for b in profile.bins:
        totals[b.week] += b.total
        flowering[b.week] += b.flowering

    ax.bar(weeks, [totals[w] for w in weeks], width=0.9, color=ALL_OBSERVATIONS_COLOR)
    ax.bar(
        weeks,
        [flowering[w] for w in weeks],
        width=0.9,
        color=category_color(profile.category),
    )
    if profile.phenology is not None:
        ax.axvline(profile.phenology.peak_week, color="black", linewidth=0.8, linestyle=":")

    title = profile.scientific_name
    if profile.common_name:
        title += f"\n{profile.common_name}"
    if header:
        ax.text(0.0, 1.32, header, transform=ax.transAxes, fontsize=9, fontweight="bold")
    ax.set_title(
        title,
        fontsize=7,
        fontstyle="italic",
        color=NATIVE_EDGE_COLOR if profile.native else INTRODUCED_EDGE_COLOR,
    )
    ax.set_xlim(0.5, WEEKS_PER_YEAR + 0.5)
    ax.set_xticks([w for w, _ in MONTH_START_WEEKS][::2])
    ax.set_xticklabels([m for _, m in MONTH_START_WEEKS][::2], fontsize=6)
    ax.tick_params(axis="y", labelsize=6)
    ax.text(
        0.98,
        0.92,
        f"n={profile.counts.total}",
        transform=ax.transAxes,
        ha="right",
        fontsize=6,
    )


def _legend_handles() -> list[Patch]:
    handles = [Patch(color=ALL_OBSERVATIONS_COLOR, label="All observations")]
    handles += [Patch(color=color, label=cat.label) for cat, color in CATEGORY_COLORS.items()]
    return handles


def _page_figure(page: Page[SpeciesProfile], total_pages: int, title: str) -> Figure:
    fig, axes = plt.subplots(
        page.layout.rows,
        page.layout.cols,
        figsize=PAGE_SIZE_IN,
        squeeze=False,
    )
    flat = [ax for row in axes for ax in row]
    i = 0
    for group in page.groups:
        for j, profile in enumerate(group.items):
            _draw_species_panel(flat[i], profile, group.header if j == 0 else None)
            i += 1
    for ax in flat[i:]:
        ax.axis("off")

    fig.suptitle(f"{title} (page {page.number} of {total_pages})", fontsize=12)
    fig.legend(handles=_legend_handles(), loc="lower center", ncol=3, fontsize=7, frameon=False)
    fig.tight_layout(rect=(0, 0.05, 1, 0.95), h_pad=3.0)
    return fig


def render_genus_bar_pdf(
    pages: list[Page[SpeciesProfile]],
    output_path: Path,
    *,
    title: str = "Weekly observations by genus",
) -> Path:
    """
    Write the genus bar-chart document.

    Args:
        pages: Pages from ``plan_genus_pages``.
        output_path: Destination PDF.
        title: Page heading.

    Returns:
        ``output_path``.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with PdfPages(output_path) as pdf:
        if not pages:
            fig = empty_figure(title)
            pdf.savefig(fig)
            plt.close(fig)
            return output_path
        for page in pages:
            fig = _page_figure(page, len(pages), title)
            pdf.savefig(fig)
            plt.close(fig)
    return output_path
