# acadcal/util/timeparse.py
from __future__ import annotations

import re
from typing import Optional, Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60


class InvalidTimeFormat(ValueError):
    """Raised when a wall-clock string is not a valid 24-hour HH:MM."""


def parse_hhmm(s: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute).

    "24:00" is accepted as the end-of-day sentinel so a slot may close at
    midnight; any other hour above 23 is rejected.
    """
    if not isinstance(s, str):
        raise InvalidTimeFormat(f"Invalid HH:MM: {s!r}")
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise InvalidTimeFormat(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if hh == 24 and mm == 0:
        return hh, mm
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise InvalidTimeFormat(f"Invalid HH:MM: {s!r}")
    return hh, mm


def time_to_minutes(s: str) -> int:
    """Minutes since midnight for an "HH:MM" string."""
    hh, mm = parse_hhmm(s)
    return hh * 60 + mm


def try_time_to_minutes(s: Optional[str]) -> Optional[int]:
    try:
        return time_to_minutes(s)  # type: ignore[arg-type]
    except InvalidTimeFormat:
        return None


def minutes_to_hhmm(minutes: int) -> str:
    m = max(0, min(MINUTES_PER_DAY, int(minutes)))
    return f"{m // 60:02d}:{m % 60:02d}"


def format_hour_label(hour: int) -> str:
    """9 -> "9 AM", 12 -> "12 PM", 0 -> "12 AM"."""
    h = int(hour) % 24
    ampm = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12} {ampm}"


def format_time_12h(s: str) -> str:
    """"13:05" -> "1:05 PM"."""
    hh, mm = parse_hhmm(s)
    h = hh % 24
    ampm = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{mm:02d} {ampm}"


def format_time_range(start: Optional[str], end: Optional[str]) -> Optional[Tuple[str, Optional[str]]]:
    """Return (range_label, duration_label) or None when either side is missing.

    The duration label is omitted for empty or inverted ranges.
    """
    if not start or not end:
        return None
    dur = time_to_minutes(end) - time_to_minutes(start)
    label = f"{format_time_12h(start)} - {format_time_12h(end)}"
    return label, (f"{dur} min" if dur > 0 else None)
