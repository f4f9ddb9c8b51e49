# acadcal/options.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .model import Record, Ref, ScheduleItem, WEEKDAYS_MON_FIRST


@dataclass(frozen=True)
class FilterOptions:
    subjects: Tuple[Ref, ...]
    teachers: Tuple[Ref, ...]
    classes: Tuple[Ref, ...]


@dataclass(frozen=True)
class ScheduleStats:
    total: int
    active_days: int
    unique_teachers: int
    unique_subjects: int


def group_by_weekday(items: Sequence[ScheduleItem]) -> Dict[str, Tuple[ScheduleItem, ...]]:
    """Monday-first mapping with every weekday present; input order kept per day."""
    buckets: Dict[str, List[ScheduleItem]] = {d: [] for d in WEEKDAYS_MON_FIRST}
    for it in items or ():
        if it.day_of_week in buckets:
            buckets[it.day_of_week].append(it)
    return {d: tuple(v) for d, v in buckets.items()}


def _unique(refs: Sequence[Optional[Ref]]) -> Tuple[Ref, ...]:
    seen: Dict[str, Ref] = {}
    for r in refs:
        if r is None or not r.id:
            continue
        # Last record wins for the label, first sighting fixes the order.
        seen[r.id] = r
    return tuple(seen.values())


def filter_options(items: Sequence[Record]) -> FilterOptions:
    """Dropdown option lists built from what is actually on the schedule."""
    return FilterOptions(
        subjects=_unique([getattr(i, "subject", None) for i in items or ()]),
        teachers=_unique([getattr(i, "teacher", None) for i in items or ()]),
        classes=_unique([getattr(i, "class_ref", None) for i in items or ()]),
    )


def schedule_stats(grouped: Mapping[str, Sequence[ScheduleItem]]) -> ScheduleStats:
    items = [it for d in WEEKDAYS_MON_FIRST for it in (grouped or {}).get(d) or ()]
    return ScheduleStats(
        total=len(items),
        active_days=sum(1 for d in WEEKDAYS_MON_FIRST if (grouped or {}).get(d)),
        unique_teachers=len({it.teacher.id for it in items if it.teacher is not None}),
        unique_subjects=len({it.subject.id for it in items if it.subject is not None}),
    )


def total_items(grouped: Mapping[str, Sequence[Record]]) -> int:
    return sum(len((grouped or {}).get(d) or ()) for d in WEEKDAYS_MON_FIRST)


def effective_day(grouped: Mapping[str, Sequence[Record]], selected: str, *, compact: bool = False) -> str:
    """Day to show. In compact (single-column) mode an empty selection jumps to
    the first weekday that has items; otherwise the selection is kept."""
    if not compact:
        return selected
    if (grouped or {}).get(selected):
        return selected
    for d in WEEKDAYS_MON_FIRST:
        if (grouped or {}).get(d):
            return d
    return selected


def navigate_day(day: str, direction: str) -> str:
    """Previous/next weekday with wrap-around (Sunday -> Monday)."""
    if day not in WEEKDAYS_MON_FIRST:
        raise ValueError(f"unknown weekday {day!r}")
    if direction not in ("prev", "next"):
        raise ValueError(f"direction must be 'prev' or 'next', got {direction!r}")
    i = WEEKDAYS_MON_FIRST.index(day)
    step = -1 if direction == "prev" else 1
    return WEEKDAYS_MON_FIRST[(i + step) % len(WEEKDAYS_MON_FIRST)]


def default_day(today_weekday: Optional[str]) -> str:
    return today_weekday if today_weekday in WEEKDAYS_MON_FIRST else "Monday"
