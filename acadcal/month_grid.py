# acadcal/month_grid.py
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import LayoutConfig, resolve_config
from .model import CalendarCell, Event
from .util.dates import (
    MONTH_NAMES,
    day_contains_event,
    days_in_month,
    first_weekday_sun0,
    shift_month,
)

GRID_CELLS = 42
GRID_COLUMNS = 7


def _check_year_month(year: int, month: int) -> None:
    if not isinstance(year, int) or isinstance(year, bool):
        raise TypeError(f"year must be int, got {type(year).__name__}")
    if not isinstance(month, int) or isinstance(month, bool):
        raise TypeError(f"month must be int, got {type(month).__name__}")
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def events_for_day(day: dt.date, events: Iterable[Event]) -> Tuple[Event, ...]:
    """The day bucket: events whose civil span covers `day`, in input order."""
    return tuple(ev for ev in events if day_contains_event(day, ev))


def build_month_grid(
    year: int,
    month: int,
    events: Sequence[Event] = (),
    *,
    today: Optional[dt.date] = None,
    config: Optional[LayoutConfig] = None,
) -> Tuple[CalendarCell, ...]:
    """Fixed 6x7 month matrix, Sunday first.

    Leading cells come from the end of the previous month and trailing cells
    from the start of the next one; neither carries events. Only current-month
    cells can be flagged `is_today`.
    """
    _check_year_month(year, month)
    cfg = resolve_config(config)
    today = today or dt.date.today()
    events = tuple(events or ())

    first = dt.date(year, month, 1)
    lead = first_weekday_sun0(year, month)
    n_days = days_in_month(year, month)

    cells: List[CalendarCell] = []

    prev = shift_month(first, -1)
    prev_len = days_in_month(prev.year, prev.month)
    for i in range(lead - 1, -1, -1):
        d = dt.date(prev.year, prev.month, prev_len - i)
        cells.append(CalendarCell(day_number=d.day, date=d, is_current_month=False, max_visible=cfg.max_cell_events))

    for day in range(1, n_days + 1):
        d = dt.date(year, month, day)
        cells.append(
            CalendarCell(
                day_number=day,
                date=d,
                is_current_month=True,
                is_today=(d == today),
                events=events_for_day(d, events),
                max_visible=cfg.max_cell_events,
            )
        )

    # A 31-day month starting on Saturday would need 37 cells, so 42 always
    # suffices for the Gregorian calendar; anything past 42 is not shown.
    nxt = shift_month(first, 1)
    remaining = GRID_CELLS - len(cells)
    for day in range(1, remaining + 1):
        d = dt.date(nxt.year, nxt.month, day)
        cells.append(CalendarCell(day_number=day, date=d, is_current_month=False, max_visible=cfg.max_cell_events))

    return tuple(cells[:GRID_CELLS])


def grid_rows(cells: Sequence[CalendarCell]) -> List[Tuple[CalendarCell, ...]]:
    return [tuple(cells[i : i + GRID_COLUMNS]) for i in range(0, len(cells), GRID_COLUMNS)]


def month_event_count(cells: Sequence[CalendarCell]) -> int:
    """Sum of bucket sizes across the grid (an event spanning N days counts N times)."""
    return sum(len(c.events) for c in cells)


def month_title(year: int, month: int) -> str:
    _check_year_month(year, month)
    return f"{MONTH_NAMES[month - 1]} {year}"


def month_distinct_events(cells: Sequence[CalendarCell]) -> Tuple[Event, ...]:
    """Distinct events shown anywhere in the grid, in first-appearance order."""
    seen = set()
    out: List[Event] = []
    for c in cells:
        for ev in c.events:
            if ev.id in seen:
                continue
            seen.add(ev.id)
            out.append(ev)
    return tuple(out)
