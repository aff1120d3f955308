"""Flowering annotation parsing.

``reproductiveCondition`` is free text in most exports and a pipe-delimited
controlled vocabulary in iNaturalist's DwC-A (``flowering|fruiting``). Some
exports carry ``term=value`` pairs (``Plant Phenology=Flowering``).
"""

from __future__ import annotations

import re
from functools import lru_cache

FLOWERING_TERMS = frozenset(
    {
        "flowering",
        "flowers",
        "flower",
        "in flower",
        "flower budding",
        "flower buds",
        "anthesis",
    }
)

_SEGMENT_SPLIT = re.compile(r"[|;,]")
_NEGATION_PREFIXES = ("no ", "not ", "non-", "without ")
_NEGATED_BEFORE = re.compile(r"\b(?:no|not|without)\s+$")


@lru_cache(maxsize=8)
def _term_pattern(terms: frozenset[str]) -> re.Pattern[str]:
    """Whole-word alternation of the terms, longest first."""
    phrases = sorted((" ".join(t.casefold().split()) for t in terms), key=len, reverse=True)
    alternation = "|".join(re.escape(p) for p in phrases if p)
    return re.compile(rf"(?<![\w-])(?:{alternation})(?![\w-])")


def is_flowering(annotation: str | None, terms: frozenset[str] = FLOWERING_TERMS) -> bool:
    """Return True if any segment of the annotation mentions a flowering state.

    Segments are split on ``|``, ``;`` and ``,``; a ``term=value`` segment is
    judged by its value. Terms match as whole words or phrases anywhere in a
    segment ("Flowering and fruiting", "in full flower"), case-insensitively.
    A segment that opens with a negation ("no evidence of flowering",
    "non-flowering") or negates the term directly ("plant not flowering")
    never matches.
    """
    if not annotation or not terms:
        return False
    pattern = _term_pattern(terms)
    for raw in _SEGMENT_SPLIT.split(annotation.casefold()):
        segment = raw.split("=", 1)[1] if "=" in raw else raw
        segment = " ".join(segment.split())
        if not segment or segment.startswith(_NEGATION_PREFIXES):
            continue
        for match in pattern.finditer(segment):
            if not _NEGATED_BEFORE.search(segment[: match.start()]):
                return True
    return False
