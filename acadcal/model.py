# acadcal/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .util.dates import WEEKDAYS_MON_FIRST, WEEKDAYS_SUN_FIRST, long_date_label


@dataclass(frozen=True)
class Ref:
    """Opaque directory record (class, subject, teacher): `{_id, name, section?}`."""

    id: str
    name: str = ""
    section: str = ""


@dataclass(frozen=True)
class Event:
    id: str
    title: str
    start_date: dt.datetime
    end_date: dt.datetime
    event_type: str = "announcement"
    description: str = ""
    is_all_day: bool = False
    role_visibility: Tuple[str, ...] = ()
    class_ref: Optional[Ref] = None
    is_published: bool = True

    # Optional wall-clock bounds so dated events can be placed on a timeline.
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class ScheduleItem:
    id: str
    day_of_week: str
    start_time: str
    end_time: str
    subject: Optional[Ref] = None
    teacher: Optional[Ref] = None
    class_ref: Optional[Ref] = None
    room: str = ""
    section: str = ""
    event_type: str = "class"

    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


Record = Union[Event, ScheduleItem]


@dataclass(frozen=True)
class CalendarCell:
    day_number: int
    date: dt.date
    is_current_month: bool
    is_today: bool = False
    events: Tuple[Event, ...] = ()
    max_visible: int = 3

    @property
    def visible_events(self) -> Tuple[Event, ...]:
        return self.events[: self.max_visible]

    @property
    def overflow(self) -> int:
        return max(0, len(self.events) - self.max_visible)


@dataclass(frozen=True)
class DayColumn:
    date: dt.date
    weekday: str
    is_today: bool
    events: Tuple[Event, ...] = ()


@dataclass(frozen=True)
class DateGroup:
    key: str  # YYYY-MM-DD
    date: dt.date
    events: Tuple[Event, ...]

    @property
    def label(self) -> str:
        return long_date_label(self.date)


@dataclass(frozen=True)
class TimeWindow:
    start_hour: int
    end_hour: int
    total_minutes: int

    @property
    def start_minutes(self) -> int:
        return self.start_hour * 60

    @property
    def end_minutes(self) -> int:
        return self.end_hour * 60


@dataclass(frozen=True)
class PositionedItem:
    item: Record
    top_percent: float
    height_percent: float
    is_now: bool
    is_past: bool


@dataclass(frozen=True)
class TimelineEntry:
    item: Record
    start_minutes: int
    is_now: bool
    is_past: bool


@dataclass(frozen=True)
class DataWarning:
    kind: str  # "invalid_range" | "invalid_time_format" | "invalid_record"
    record_id: Optional[str]
    message: str
    index: Optional[int] = None


@dataclass(frozen=True)
class TimelineLayout:
    window: TimeWindow
    current_minutes: int
    now_position: float  # -1 means "do not render"
    mode: str  # "grid" | "list"
    items: Tuple[PositionedItem, ...] = ()
    entries: Tuple[TimelineEntry, ...] = ()
    warnings: Tuple[DataWarning, ...] = ()


__all__ = [
    "WEEKDAYS_SUN_FIRST",
    "WEEKDAYS_MON_FIRST",
    "Ref",
    "Event",
    "ScheduleItem",
    "Record",
    "CalendarCell",
    "DayColumn",
    "DateGroup",
    "TimeWindow",
    "PositionedItem",
    "TimelineEntry",
    "DataWarning",
    "TimelineLayout",
]
