"""Page planning for the four report products.

Each policy is a pure function of (profiles, page size) and returns an
ordered list of ``Page`` objects. Sorting always ends in the scientific name
so identical input gives identical pages.

Policies:
  - plan_genus_pages: bar charts, grouped by genus, genera kept whole
  - plan_ridge_pages: ridge plots, native species ranked by peak week
  - plan_rare_pages: rare-species table rows ranked by peak week
  - plan_family_pages: family overview table rows
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import groupby
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from flowering_phenology.schemas import AbundanceCategory

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from flowering_phenology.analysis.family_overview import FamilyRow
    from flowering_phenology.analysis.profiles import SpeciesProfile

T = TypeVar("T")


# =============================================================================
# Data Models
# =============================================================================


@dataclass(frozen=True)
class PageLayout:
    """Grid hint for a renderer plus the key the page was sorted by."""

    rows: int
    cols: int
    sort_key: str


@dataclass(frozen=True)
class PageGroup(Generic[T]):
    """A run of items sharing a header (a genus, or the whole page)."""

    label: str
    items: tuple[T, ...]
    continued: bool = False

    @property
    def header(self) -> str:
        if self.continued:
            return f"{self.label} (continued)"
        return self.label


@dataclass(frozen=True)
class Page(Generic[T]):
    """One physical page of a report."""

    number: int
    groups: tuple[PageGroup[T], ...]
    layout: PageLayout

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(item for group in self.groups for item in group.items)

    def __len__(self) -> int:
        return sum(len(g.items) for g in self.groups)


def grid_layout(page_size: int, sort_key: str) -> PageLayout:
    """Near-square grid that holds ``page_size`` panels (9 → 3x3)."""
    cols = math.ceil(math.sqrt(page_size))
    rows = math.ceil(page_size / cols)
    return PageLayout(rows=rows, cols=cols, sort_key=sort_key)


def _check_page_size(page_size: int) -> None:
    if page_size < 1:
        msg = f"page_size must be at least 1, got {page_size}"
        raise ValueError(msg)


def _chunk(items: Sequence[T], size: int) -> list[tuple[T, ...]]:
    return [tuple(items[i : i + size]) for i in range(0, len(items), size)]


def _ranked_pages(items: Sequence[T], page_size: int, layout: PageLayout) -> list[Page[T]]:
    return [
        Page(number=n, groups=(PageGroup(label="", items=chunk),), layout=layout)
        for n, chunk in enumerate(_chunk(items, page_size), start=1)
    ]


def _peak_rank(profile: SpeciesProfile) -> tuple[float, str]:
    peak = profile.phenology.peak_week if profile.phenology else math.inf
    return peak, profile.scientific_name


# =============================================================================
# Policies
# =============================================================================


def plan_genus_pages(
    profiles: Iterable[SpeciesProfile],
    page_size: int = 9,
) -> list[Page[SpeciesProfile]]:
    """
    Pack genera onto pages of at most ``page_size`` species.

    Genera are taken alphabetically and species alphabetically within a
    genus. A genus goes on the current page if it fits, otherwise on a new
    page, so a genus of ``page_size`` or fewer species is never split. A
    larger genus starts on a fresh page and continues on following pages,
    each continuation carrying a repeated header.
    """
    _check_page_size(page_size)
    layout = grid_layout(page_size, sort_key="genus, scientific_name")
    ordered = sorted(profiles, key=lambda p: (p.genus, p.scientific_name))

    pages: list[list[PageGroup[SpeciesProfile]]] = []
    current: list[PageGroup[SpeciesProfile]] = []
    used = 0
    for genus, members in groupby(ordered, key=lambda p: p.genus):
        species = tuple(members)
        if len(species) > page_size:
            if current:
                pages.append(current)
            chunks = _chunk(species, page_size)
            for i, chunk in enumerate(chunks[:-1]):
                pages.append([PageGroup(label=genus, items=chunk, continued=i > 0)])
            current = [PageGroup(label=genus, items=chunks[-1], continued=True)]
            used = len(chunks[-1])
            continue
        if used + len(species) > page_size:
            pages.append(current)
            current, used = [], 0
        current.append(PageGroup(label=genus, items=species))
        used += len(species)
    if current:
        pages.append(current)

    return [
        Page(number=n, groups=tuple(groups), layout=layout)
        for n, groups in enumerate(pages, start=1)
    ]


def plan_ridge_pages(
    profiles: Iterable[SpeciesProfile],
    page_size: int = 25,
) -> list[Page[SpeciesProfile]]:
    """Native species with phenology, ranked by peak week across all pages."""
    _check_page_size(page_size)
    ranked = sorted((p for p in profiles if p.native and p.has_phenology), key=_peak_rank)
    layout = PageLayout(rows=page_size, cols=1, sort_key="peak_week, scientific_name")
    return _ranked_pages(ranked, page_size, layout)


def plan_rare_pages(
    profiles: Iterable[SpeciesProfile],
    rows_per_page: int = 30,
) -> list[Page[SpeciesProfile]]:
    """Narrow-region rare species with phenology, one logical table split into pages."""
    _check_page_size(rows_per_page)
    ranked = sorted(
        (p for p in profiles if p.category is AbundanceCategory.CT_RARE and p.has_phenology),
        key=_peak_rank,
    )
    layout = PageLayout(rows=rows_per_page, cols=1, sort_key="peak_week, scientific_name")
    return _ranked_pages(ranked, rows_per_page, layout)


def plan_family_pages(
    rows: Iterable[FamilyRow],
    rows_per_page: int = 40,
) -> list[Page[FamilyRow]]:
    """Family overview rows, alphabetical, split into pages."""
    _check_page_size(rows_per_page)
    ordered = sorted(rows, key=lambda r: r.family)
    layout = PageLayout(rows=rows_per_page, cols=1, sort_key="family")
    return _ranked_pages(ordered, rows_per_page, layout)


# =============================================================================
# Serialization
# =============================================================================


def page_assignments(
    pages: Sequence[Page[Any]],
    key: str = "scientific_name",
) -> list[dict[str, Any]]:
    """JSON-ready view of which items landed on which page, in order."""
    return [
        {
            "page": page.number,
            "layout": {"rows": page.layout.rows, "cols": page.layout.cols},
            "sort_key": page.layout.sort_key,
            "groups": [
                {
                    "label": group.label,
                    "continued": group.continued,
                    "items": [getattr(item, key) for item in group.items],
                }
                for group in page.groups
            ],
        }
        for page in pages
    ]
