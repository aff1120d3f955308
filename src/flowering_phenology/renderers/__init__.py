"""Rendering: planned pages -> documents.

All renderers follow the same pattern:
  - Input: a list of ``Page`` objects from ``pagination`` (plus display options)
  - Output: an HTML string (tables) or a written PDF path (charts)
  - No analysis, no network, no Prefect decorators

An empty page list is valid input and produces a one-page document saying
there is nothing to show.

Used by flows/build.py which orchestrates the rendering pipeline.

Public API:
  - genus_bars: render_genus_bar_pdf
  - ridgelines: render_ridge_pdf, ridge_density
  - tables: build_family_table_html, build_rare_table_html
  - palette: CATEGORY_COLORS, category_color
  - figures: PAGE_SIZE_IN, empty_figure (shared by the PDF renderers)
  - week_labels: week_to_date, week_label, window_label

Adding a renderer
-----------------
1. Create ``renderers/{name}.py`` with a function taking ``list[Page]``.
2. HTML output: add a template in ``templates/{name}.html.j2`` extending
   ``report_document.html.j2`` and call ``render_template``.
   PDF output: draw one matplotlib figure per page into ``PdfPages``.
3. Wire into ``flows/build.py`` and add tests with a small page list.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for the HTML renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
