# acadcal/export.py
"""JSON-ready dicts for hosts that render the computed views.

Keys are camelCase to match the records the hosts already consume. Every
function returns fresh plain containers (dict/list/str/int/float/bool/None).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from .model import (
    CalendarCell,
    DataWarning,
    DateGroup,
    DayColumn,
    Event,
    PositionedItem,
    Record,
    Ref,
    ScheduleItem,
    TimelineEntry,
    TimelineLayout,
    TimeWindow,
)
from .grouped_list import count_label
from .palette import event_type_config, schedule_type_config, subject_accent
from .timeline import hour_slots
from .util.timeparse import InvalidTimeFormat, format_time_range, minutes_to_hhmm


def _iso(v: Any) -> Optional[str]:
    return v.isoformat() if v is not None else None


def ref_to_dict(ref: Optional[Ref]) -> Optional[Dict[str, Any]]:
    if ref is None:
        return None
    d: Dict[str, Any] = {"_id": ref.id, "name": ref.name}
    if ref.section:
        d["section"] = ref.section
    return d


def event_to_dict(ev: Event) -> Dict[str, Any]:
    tc = event_type_config(ev.event_type)
    return {
        "_id": ev.id,
        "title": ev.title,
        "description": ev.description,
        "startDate": _iso(ev.start_date),
        "endDate": _iso(ev.end_date),
        "eventType": ev.event_type,
        "isAllDay": ev.is_all_day,
        "isPublished": ev.is_published,
        "roleVisibility": list(ev.role_visibility),
        "classId": ref_to_dict(ev.class_ref),
        "startTime": ev.start_time,
        "endTime": ev.end_time,
        "typeLabel": tc.label,
        "color": tc.color,
        "bg": tc.bg,
    }


def schedule_item_to_dict(item: ScheduleItem) -> Dict[str, Any]:
    tc = schedule_type_config(item.event_type)
    try:
        rng = format_time_range(item.start_time, item.end_time)
    except InvalidTimeFormat:
        rng = None
    return {
        "_id": item.id,
        "dayOfWeek": item.day_of_week,
        "startTime": item.start_time,
        "endTime": item.end_time,
        "subjectId": ref_to_dict(item.subject),
        "teacherId": ref_to_dict(item.teacher),
        "classId": ref_to_dict(item.class_ref),
        "room": item.room,
        "section": item.section,
        "eventType": item.event_type,
        "typeLabel": tc.label,
        "accent": subject_accent(item.subject.id if item.subject else None),
        "timeLabel": rng[0] if rng else None,
        "durationLabel": rng[1] if rng else None,
    }


def record_to_dict(rec: Record) -> Dict[str, Any]:
    if isinstance(rec, ScheduleItem):
        return schedule_item_to_dict(rec)
    return event_to_dict(rec)


def warning_to_dict(w: DataWarning) -> Dict[str, Any]:
    return {"kind": w.kind, "recordId": w.record_id, "message": w.message, "index": w.index}


def warnings_to_list(warns: Sequence[DataWarning]) -> List[Dict[str, Any]]:
    return [warning_to_dict(w) for w in warns or ()]


def cell_to_dict(cell: CalendarCell) -> Dict[str, Any]:
    return {
        "dayNumber": cell.day_number,
        "date": cell.date.isoformat(),
        "isCurrentMonth": cell.is_current_month,
        "isToday": cell.is_today,
        "events": [event_to_dict(e) for e in cell.visible_events],
        "overflow": cell.overflow,
    }


def column_to_dict(col: DayColumn) -> Dict[str, Any]:
    return {
        "date": col.date.isoformat(),
        "weekday": col.weekday,
        "isToday": col.is_today,
        "events": [event_to_dict(e) for e in col.events],
    }


def group_to_dict(group: DateGroup) -> Dict[str, Any]:
    return {
        "key": group.key,
        "label": group.label,
        "countLabel": count_label(len(group.events)),
        "events": [event_to_dict(e) for e in group.events],
    }


def window_to_dict(window: TimeWindow) -> Dict[str, Any]:
    return {
        "startHour": window.start_hour,
        "endHour": window.end_hour,
        "totalMinutes": window.total_minutes,
    }


def positioned_to_dict(p: PositionedItem) -> Dict[str, Any]:
    d = record_to_dict(p.item)
    d.update(
        {
            "topPercent": p.top_percent,
            "heightPercent": p.height_percent,
            "isNow": p.is_now,
            "isPast": p.is_past,
        }
    )
    return d


def entry_to_dict(e: TimelineEntry) -> Dict[str, Any]:
    d = record_to_dict(e.item)
    d.update({"isNow": e.is_now, "isPast": e.is_past})
    return d


def layout_to_dict(layout: TimelineLayout) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "mode": layout.mode,
        "window": window_to_dict(layout.window),
        "currentTime": minutes_to_hhmm(layout.current_minutes),
        "nowPosition": layout.now_position,
        "warnings": warnings_to_list(layout.warnings),
    }
    if layout.mode == "grid":
        out["slots"] = [{"time": s, "isCurrentHour": cur} for s, cur in hour_slots(layout.window, layout.current_minutes)]
        out["items"] = [positioned_to_dict(p) for p in layout.items]
    else:
        out["items"] = [entry_to_dict(e) for e in layout.entries]
    return out


def calendar_view_to_dict(cv: Any) -> Dict[str, Any]:
    """Flatten a views.CalendarView; only the body for its own mode is emitted."""
    out: Dict[str, Any] = {
        "view": cv.view,
        "anchor": cv.anchor.isoformat(),
        "title": cv.title,
        "viewKey": cv.view_key,
        "warnings": warnings_to_list(cv.warnings),
    }
    if cv.view == "month":
        out["cells"] = [cell_to_dict(c) for c in cv.cells]
    elif cv.view == "week":
        out["columns"] = [column_to_dict(col) for col in (cv.columns or {}).values()]
    else:
        out["groups"] = [group_to_dict(g) for g in cv.groups]
    return out


def schedule_view_to_dict(sv: Any) -> Dict[str, Any]:
    return {
        "day": sv.day,
        "viewKey": sv.view_key,
        "total": sv.total,
        "stats": {
            "total": sv.stats.total,
            "activeDays": sv.stats.active_days,
            "uniqueTeachers": sv.stats.unique_teachers,
            "uniqueSubjects": sv.stats.unique_subjects,
        },
        "counts": {day: len(items) for day, items in sv.grouped.items()},
        "layout": layout_to_dict(sv.layout),
        "warnings": warnings_to_list(sv.warnings),
    }
