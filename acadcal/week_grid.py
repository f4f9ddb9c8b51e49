# acadcal/week_grid.py
from __future__ import annotations

import datetime as dt
from typing import Dict, Optional, Sequence

from .model import DayColumn, Event, WEEKDAYS_SUN_FIRST
from .month_grid import events_for_day
from .util.dates import MONTH_NAMES, civil_date, week_start


def week_days(anchor: dt.date) -> list[dt.date]:
    start = week_start(anchor)
    return [start + dt.timedelta(days=i) for i in range(7)]


def build_week_grid(
    anchor: dt.date,
    events: Sequence[Event] = (),
    *,
    today: Optional[dt.date] = None,
) -> Dict[str, DayColumn]:
    """Seven columns, Sunday through Saturday, for the week containing `anchor`.

    Keys are weekday names in display order.
    """
    if not isinstance(anchor, dt.date):
        raise TypeError(f"anchor must be a date, got {type(anchor).__name__}")
    today = civil_date(today) if today is not None else dt.date.today()
    events = tuple(events or ())

    out: Dict[str, DayColumn] = {}
    for name, day in zip(WEEKDAYS_SUN_FIRST, week_days(civil_date(anchor))):
        out[name] = DayColumn(
            date=day,
            weekday=name,
            is_today=(day == today),
            events=events_for_day(day, events),
        )
    return out


def week_title(anchor: dt.date) -> str:
    """Header text: "3 - 9 March 2024" or "25 February - 2 March 2024".

    The year shown is the anchor's year, as the calendar header does.
    """
    days = week_days(civil_date(anchor))
    first, last = days[0], days[-1]
    year = civil_date(anchor).year
    if first.month == last.month:
        return f"{first.day} - {last.day} {MONTH_NAMES[first.month - 1]} {year}"
    return f"{first.day} {MONTH_NAMES[first.month - 1]} - {last.day} {MONTH_NAMES[last.month - 1]} {year}"
