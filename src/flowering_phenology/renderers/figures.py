"""Matplotlib setup shared by the PDF renderers.

Forces the non-interactive Agg backend and builds the placeholder sheet
written when a document has no pages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

if TYPE_CHECKING:
    from matplotlib.figure import Figure

PAGE_SIZE_IN = (8.5, 11)
EMPTY_MESSAGE = "No species to display."


def empty_figure(title: str, message: str = EMPTY_MESSAGE) -> Figure:
    """A letter-size sheet with the document title and a notice."""
    fig = plt.figure(figsize=PAGE_SIZE_IN)
    fig.text(0.5, 0.6, title, ha="center", va="center", fontsize=16, fontweight="bold")
    fig.text(0.5, 0.5, message, ha="center", va="center", fontsize=12)
    return fig
