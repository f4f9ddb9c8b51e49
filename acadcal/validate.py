"""Record validation helpers (library-facing).

The layout builders assume records that already passed through here: every
check below runs once at the boundary, never at read sites.
"""

from __future__ import annotations

from typing import List

from .model import Event, ScheduleItem, WEEKDAYS_SUN_FIRST
from .util.timeparse import InvalidTimeFormat, time_to_minutes


class RecordError(ValueError):
    """Raised when a single record cannot be placed on any layout."""

    kind = "invalid_record"

    def __init__(self, message: str, *, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class InvalidRecord(RecordError):
    kind = "invalid_record"


class InvalidRange(RecordError):
    kind = "invalid_range"


class InvalidTime(RecordError):
    """Wraps InvalidTimeFormat so it can travel through the record pipeline."""

    kind = "invalid_time_format"


def _time_errs(label: str, start: str | None, end: str | None, errs: List[str]) -> None:
    try:
        s = time_to_minutes(start)  # type: ignore[arg-type]
        e = time_to_minutes(end)  # type: ignore[arg-type]
    except InvalidTimeFormat as ex:
        errs.append(f"{label}: {ex}")
        return
    if e <= s:
        errs.append(f"{label}: endTime {end!r} must be after startTime {start!r}")


def validate_event(ev: Event, *, label: str = "event") -> List[str]:
    errs: List[str] = []
    if not ev.id:
        errs.append(f"{label}: id must be non-empty")
    if ev.end_date < ev.start_date:
        errs.append(f"{label}: endDate {ev.end_date.isoformat()} is before startDate {ev.start_date.isoformat()}")
    if ev.start_time is not None or ev.end_time is not None:
        _time_errs(label, ev.start_time, ev.end_time, errs)
    return errs


def validate_schedule_item(item: ScheduleItem, *, label: str = "schedule item") -> List[str]:
    errs: List[str] = []
    if not item.id:
        errs.append(f"{label}: id must be non-empty")
    if item.day_of_week not in WEEKDAYS_SUN_FIRST:
        errs.append(f"{label}: dayOfWeek {item.day_of_week!r} is not a weekday name")
    _time_errs(label, item.start_time, item.end_time, errs)
    return errs


def assert_valid_schedule_item(item: ScheduleItem) -> None:
    try:
        s = time_to_minutes(item.start_time)
        e = time_to_minutes(item.end_time)
    except InvalidTimeFormat as ex:
        raise InvalidTime(str(ex), record_id=item.id) from ex
    if e <= s:
        raise InvalidRange(
            f"endTime {item.end_time!r} must be after startTime {item.start_time!r}",
            record_id=item.id,
        )
    if item.day_of_week not in WEEKDAYS_SUN_FIRST:
        raise InvalidRecord(f"dayOfWeek {item.day_of_week!r} is not a weekday name", record_id=item.id)


def assert_valid_event(ev: Event) -> None:
    if ev.end_date < ev.start_date:
        raise InvalidRange(
            f"endDate {ev.end_date.isoformat()} is before startDate {ev.start_date.isoformat()}",
            record_id=ev.id,
        )


__all__ = [
    "RecordError",
    "InvalidRecord",
    "InvalidRange",
    "InvalidTime",
    "validate_event",
    "validate_schedule_item",
    "assert_valid_event",
    "assert_valid_schedule_item",
]
