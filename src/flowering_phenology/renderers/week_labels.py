"""Week-bin to calendar-date labels.

Week bins are fixed day-of-year ranges, so labels are computed against a
common (non-leap) reference year.
"""

from __future__ import annotations

from datetime import date, timedelta

_REFERENCE_YEAR = 2001

#: Week bins in which each month begins, for axis ticks (Jan=1, Feb=5, ...).
MONTH_START_WEEKS: tuple[tuple[int, str], ...] = tuple(
    (
        (date(_REFERENCE_YEAR, m, 1).timetuple().tm_yday - 1) // 7 + 1,
        date(_REFERENCE_YEAR, m, 1).strftime("%b"),
    )
    for m in range(1, 13)
)


def week_to_date(week: float) -> date:
    """Calendar date at a (possibly fractional) week position, week 1.0 = Jan 1."""
    offset = round((week - 1) * 7)
    offset = max(0, min(364, offset))
    return date(_REFERENCE_YEAR, 1, 1) + timedelta(days=offset)


def week_label(week: float) -> str:
    """E.g. ``Apr 2 (wk 14.3)``."""
    d = week_to_date(week)
    return f"{d.strftime('%b')} {d.day} (wk {week:.1f})"


def window_label(start: float, end: float) -> str:
    """E.g. ``Mar 26–May 14``."""
    s, e = week_to_date(start), week_to_date(end)
    return f"{s.strftime('%b')} {s.day}–{e.strftime('%b')} {e.day}"
