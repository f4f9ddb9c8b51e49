# acadcal/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# The layout engine never converts event timestamps between zones. The zone
# knob only picks the wall clock that "now" and "today" are read from.

_LOCAL_ALIASES = frozenset({"", "local", "system", "native"})
_UTC_ALIASES = frozenset({"utc", "z", "gmt", "utc0", "utc+0"})
_FIXED_OFFSET = re.compile(r"^(?P<sign>[+-])(?P<hh>\d{2}):?(?P<mm>\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    """Canonical spelling of a zone knob: "local", "UTC", a fixed offset or an IANA name."""
    s = "" if name is None else str(name).strip()
    if s.lower() in _LOCAL_ALIASES:
        return "local"
    if s.lower() in _UTC_ALIASES:
        return "UTC"
    return s


def _fixed_offset(zone: str) -> Optional[dt.timezone]:
    m = _FIXED_OFFSET.match(zone)
    if m is None:
        return None
    hours, minutes = int(m.group("hh")), int(m.group("mm"))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid timezone offset: {zone!r}")
    delta = dt.timedelta(hours=hours, minutes=minutes)
    return dt.timezone(-delta if m.group("sign") == "-" else delta)


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """tzinfo for a zone knob; ValueError when the name is not a known zone."""
    zone = normalize_tz_name(name)
    if zone == "UTC":
        return dt.timezone.utc
    if zone == "local":
        return dt.datetime.now().astimezone().tzinfo or dt.timezone.utc
    offset = _fixed_offset(zone)
    if offset is not None:
        return offset
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as ex:
        raise ValueError(f"Invalid timezone identifier: {zone!r}") from ex


def now_local(tz: dt.tzinfo) -> dt.datetime:
    """Wall-clock "now" in `tz` as a naive datetime (civil fields only)."""
    return dt.datetime.now(tz=tz).replace(tzinfo=None)


def today_date(tz: dt.tzinfo) -> dt.date:
    return now_local(tz).date()
