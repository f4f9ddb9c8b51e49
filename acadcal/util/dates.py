# acadcal/util/dates.py
from __future__ import annotations

import calendar
import datetime as dt
import re
from typing import Any, Optional

# Civil-date helpers. Every comparison here reads the local calendar fields
# of the values it is given; nothing is shifted between timezones.

_ISO_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6})\d*)?)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?$"
)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAYS_SUN_FIRST = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
WEEKDAYS_MON_FIRST = WEEKDAYS_SUN_FIRST[1:] + WEEKDAYS_SUN_FIRST[:1]

_DAY_START = dt.time(0, 0, 0)
_DAY_END = dt.time(23, 59, 59, 999999)
_NOON = dt.time(12, 0, 0)


def parse_civil_datetime(value: Any) -> Optional[dt.datetime]:
    """Coerce a date-ish value into a naive datetime, or None.

    Accepts `date`, `datetime` (tzinfo is dropped, fields kept), "YYYY-MM-DD"
    and ISO-8601 timestamps. A trailing "Z" or UTC offset is ignored.
    """
    if isinstance(value, dt.datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    m = _ISO_RE.match(value.strip())
    if not m:
        return None
    y, mo, d, hh, mi, ss, frac = m.groups()
    micro = int((frac or "0").ljust(6, "0")) if frac else 0
    try:
        return dt.datetime(int(y), int(mo), int(d), int(hh or 0), int(mi or 0), int(ss or 0), micro)
    except ValueError:
        return None


def civil_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def is_same_civil_date(a: Any, b: Any) -> bool:
    return civil_date(a) == civil_date(b)


def days_between(a: Any, b: Any) -> int:
    """Signed number of civil days from `a` to `b`."""
    return (civil_date(b) - civil_date(a)).days


def day_contains_event(day: Any, event: Any) -> bool:
    """True when civil `day` falls inside the event's [start, end] date range.

    The start is pulled back to 00:00:00 and the end pushed to the last
    instant of its date; the day itself is sampled at noon so partial-day
    timestamps on either bound cannot exclude it.
    """
    start = dt.datetime.combine(civil_date(event.start_date), _DAY_START)
    end = dt.datetime.combine(civil_date(event.end_date), _DAY_END)
    midday = dt.datetime.combine(civil_date(day), _NOON)
    return start <= midday <= end


def event_intersects_range(event: Any, first: dt.date, last: dt.date) -> bool:
    """Civil overlap of the event's date span with [first, last]."""
    return civil_date(event.start_date) <= last and civil_date(event.end_date) >= first


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(int(year), int(month))[1]


def first_weekday_sun0(year: int, month: int) -> int:
    """Weekday of the 1st of the month with Sunday=0 .. Saturday=6."""
    return (dt.date(int(year), int(month), 1).weekday() + 1) % 7


def weekday_sun0(d: Any) -> int:
    return (civil_date(d).weekday() + 1) % 7


def week_start(anchor: Any) -> dt.date:
    """The Sunday on or before `anchor`."""
    d = civil_date(anchor)
    return d - dt.timedelta(days=weekday_sun0(d))


def shift_month(d: Any, delta: int) -> dt.date:
    """Move by whole months, clamping the day to the target month length."""
    base = civil_date(d)
    idx = base.year * 12 + (base.month - 1) + int(delta)
    year, month0 = divmod(idx, 12)
    day = min(base.day, days_in_month(year, month0 + 1))
    return dt.date(year, month0 + 1, day)


def shift_week(d: Any, delta: int) -> dt.date:
    return civil_date(d) + dt.timedelta(days=7 * int(delta))


def parse_year_month(s: str) -> tuple[int, int]:
    try:
        y_s, m_s = str(s).strip().split("-", 1)
        year, month = int(y_s), int(m_s)
    except ValueError as ex:
        raise ValueError(f"Invalid YYYY-MM: {s!r}") from ex
    if not (1 <= month <= 12):
        raise ValueError(f"Invalid YYYY-MM: {s!r}")
    return year, month


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def long_date_label(d: Any) -> str:
    """"Wednesday, February 28, 2024" (en-US long form, locale independent)."""
    c = civil_date(d)
    return f"{WEEKDAYS_SUN_FIRST[weekday_sun0(c)]}, {MONTH_NAMES[c.month - 1]} {c.day}, {c.year}"
