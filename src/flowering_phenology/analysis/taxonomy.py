"""Taxonomic normalization.

Occurrence names arrive at mixed ranks and with or without authorship
("Acer rubrum L.", "Acer rubrum var. trilobum", "Acer"). Everything is
collapsed to a binomial; hybrid binomials keep their marker
("Mentha × piperita"). Names above species level can't be placed and are
dropped.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowering_phenology.datasources.occurrences import Occurrence

HYBRID_MARKERS = frozenset({"×", "x", "X"})
_GENUS = re.compile(r"^[A-Z][a-z]+(-[a-z]+)?$")
_EPITHET = re.compile(r"^[a-z][a-z-]+$")


def species_name(name: str) -> str | None:
    """Collapse a scientific name to species level.

    Returns None when the name has no usable specific epithet (genus-only
    records, unparseable strings).
    """
    tokens = name.split()
    if len(tokens) < 2 or not _GENUS.match(tokens[0]):
        return None
    genus, rest = tokens[0], tokens[1:]
    if rest[0] in HYBRID_MARKERS:
        if len(rest) < 2 or not _EPITHET.match(rest[1]):
            return None
        return f"{genus} × {rest[1]}"
    if not _EPITHET.match(rest[0]):
        return None
    return f"{genus} {rest[0]}"


def genus_of(species: str) -> str:
    """First token of a binomial."""
    return species.split()[0]


def name_key(name: str) -> str:
    """Join key: case-folded, whitespace collapsed, infraspecific ranks removed."""
    tokens = name.split()
    if tokens:
        tokens = [tokens[0].capitalize(), *(t.lower() for t in tokens[1:])]
    cleaned = " ".join(tokens)
    return (species_name(cleaned) or cleaned).casefold()


def normalize_occurrences(
    occurrences: Iterable[Occurrence],
) -> tuple[list[Occurrence], int]:
    """
    Rewrite occurrences to species-level names with their genus filled in.

    Returns:
        The normalized occurrences (new records, input order kept) and the
        number dropped because they weren't identified to species.
    """
    out: list[Occurrence] = []
    dropped = 0
    for occ in occurrences:
        species = species_name(occ.scientific_name)
        if species is None:
            dropped += 1
            continue
        out.append(replace(occ, scientific_name=species, genus=genus_of(species)))
    return out, dropped
