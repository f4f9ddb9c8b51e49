# acadcal/normalize.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from .model import DataWarning, Event, Ref, ScheduleItem, WEEKDAYS_SUN_FIRST
from .util.console import eprint, obs_enabled
from .util.dates import parse_civil_datetime
from .util.timeparse import InvalidTimeFormat, time_to_minutes
from .validate import InvalidRange, InvalidRecord, InvalidTime, RecordError, assert_valid_event, assert_valid_schedule_item

T = TypeVar("T")

_WEEKDAY_LOOKUP = {d.lower(): d for d in WEEKDAYS_SUN_FIRST}
_WEEKDAY_LOOKUP.update({d[:3].lower(): d for d in WEEKDAYS_SUN_FIRST})


@dataclass(frozen=True)
class NormalizeResult(Generic[T]):
    records: Tuple[T, ...]
    warnings: Tuple[DataWarning, ...]


def _pick(raw: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in raw and raw[k] is not None:
            return raw[k]
    return None


def _str(v: Any) -> str:
    return "" if v is None else str(v).strip()


def _bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        low = v.strip().lower()
        if low in {"1", "true", "yes", "on"}:
            return True
        if low in {"0", "false", "no", "off"}:
            return False
    return default


def record_id(raw: Any) -> str:
    if isinstance(raw, (Event, ScheduleItem)):
        return raw.id
    if not isinstance(raw, dict):
        return ""
    return _str(_pick(raw, "_id", "id"))


def normalize_ref(v: Any) -> Optional[Ref]:
    """Directory references arrive either populated (`{_id, name}`) or as a bare id."""
    if isinstance(v, dict):
        rid = _str(_pick(v, "_id", "id"))
        if not rid:
            return None
        return Ref(id=rid, name=_str(v.get("name")), section=_str(v.get("section")))
    rid = _str(v) if isinstance(v, (str, int)) else ""
    return Ref(id=rid) if rid else None


def normalize_weekday(v: Any) -> Optional[str]:
    return _WEEKDAY_LOOKUP.get(_str(v).lower())


def normalize_event(raw: Dict[str, Any]) -> Event:
    """Convert one loose event record into an Event; raises RecordError."""
    if not isinstance(raw, dict):
        raise InvalidRecord(f"event must be an object, got {type(raw).__name__}")
    rid = record_id(raw)
    if not rid:
        raise InvalidRecord("event is missing _id")

    start_raw = _pick(raw, "startDate", "start_date")
    end_raw = _pick(raw, "endDate", "end_date")
    start = parse_civil_datetime(start_raw)
    if start is None:
        raise InvalidRecord(f"unparseable startDate {start_raw!r}", record_id=rid)
    end = start if end_raw is None else parse_civil_datetime(end_raw)
    if end is None:
        raise InvalidRecord(f"unparseable endDate {end_raw!r}", record_id=rid)

    roles = _pick(raw, "roleVisibility", "role_visibility") or []
    if not isinstance(roles, list):
        roles = []

    start_time = _pick(raw, "startTime", "start_time")
    end_time = _pick(raw, "endTime", "end_time")

    ev = Event(
        id=rid,
        title=_str(raw.get("title")),
        start_date=start,
        end_date=end,
        event_type=_str(_pick(raw, "eventType", "event_type")) or "announcement",
        description=_str(raw.get("description")),
        is_all_day=_bool(_pick(raw, "isAllDay", "is_all_day"), False),
        role_visibility=tuple(str(x) for x in roles if isinstance(x, str)),
        class_ref=normalize_ref(_pick(raw, "classId", "class_id")),
        is_published=_bool(_pick(raw, "isPublished", "is_published"), True),
        start_time=_str(start_time) or None,
        end_time=_str(end_time) or None,
        raw=dict(raw),
    )
    assert_valid_event(ev)
    return ev


def normalize_schedule_item(raw: Dict[str, Any]) -> ScheduleItem:
    """Convert one loose schedule record into a ScheduleItem; raises RecordError."""
    if not isinstance(raw, dict):
        raise InvalidRecord(f"schedule item must be an object, got {type(raw).__name__}")
    rid = record_id(raw)
    if not rid:
        raise InvalidRecord("schedule item is missing _id")

    day_raw = _pick(raw, "dayOfWeek", "day_of_week")
    day = normalize_weekday(day_raw)
    if day is None:
        raise InvalidRecord(f"unknown dayOfWeek {day_raw!r}", record_id=rid)

    class_ref = normalize_ref(_pick(raw, "classId", "class_id"))
    item = ScheduleItem(
        id=rid,
        day_of_week=day,
        start_time=_str(_pick(raw, "startTime", "start_time")),
        end_time=_str(_pick(raw, "endTime", "end_time")),
        subject=normalize_ref(_pick(raw, "subjectId", "subject_id")),
        teacher=normalize_ref(_pick(raw, "teacherId", "teacher_id")),
        class_ref=class_ref,
        room=_str(raw.get("room")),
        section=_str(raw.get("section")) or (class_ref.section if class_ref else ""),
        event_type=_str(_pick(raw, "eventType", "event_type")) or "class",
        raw=dict(raw),
    )
    assert_valid_schedule_item(item)
    return item


def _warning(ex: RecordError, index: int, rid: str, label: str) -> DataWarning:
    w = DataWarning(kind=ex.kind, record_id=ex.record_id or rid or None, message=str(ex), index=index)
    if obs_enabled():
        eprint(f"[acadcal.normalize] WARN: {label}[{index}] {w.kind} id={w.record_id!r}: {w.message}")
    return w


def _event_time_warning(ev: Event, index: int) -> Tuple[Event, Optional[DataWarning]]:
    # Bad wall-clock bounds only disqualify the event from timelines; its
    # civil date span is still good for the month/week/list builders.
    if ev.start_time is None and ev.end_time is None:
        return ev, None
    try:
        s = time_to_minutes(ev.start_time)  # type: ignore[arg-type]
        e = time_to_minutes(ev.end_time)  # type: ignore[arg-type]
    except InvalidTimeFormat as ex:
        err: RecordError = InvalidTime(str(ex), record_id=ev.id)
    else:
        if e > s:
            return ev, None
        err = InvalidRange(f"endTime {ev.end_time!r} must be after startTime {ev.start_time!r}", record_id=ev.id)
    return replace(ev, start_time=None, end_time=None), _warning(err, index, ev.id, "events")


def normalize_events(raws: Iterable[Any]) -> NormalizeResult[Event]:
    """Normalize a batch; bad records are dropped and reported, never raised.

    Already-built `Event`s pass through but are still checked, so a
    backwards span is reported the same way as a raw one.
    """
    out: List[Event] = []
    warns: List[DataWarning] = []
    for i, raw in enumerate(raws or []):
        try:
            if isinstance(raw, Event):
                assert_valid_event(raw)
                ev = raw
            else:
                ev = normalize_event(raw)
        except RecordError as ex:
            warns.append(_warning(ex, i, record_id(raw), "events"))
            continue
        ev, w = _event_time_warning(ev, i)
        if w is not None:
            warns.append(w)
        out.append(ev)
    return NormalizeResult(records=tuple(out), warnings=tuple(warns))


def normalize_schedule_items(raws: Iterable[Any]) -> NormalizeResult[ScheduleItem]:
    out: List[ScheduleItem] = []
    warns: List[DataWarning] = []
    for i, raw in enumerate(raws or []):
        try:
            if isinstance(raw, ScheduleItem):
                assert_valid_schedule_item(raw)
                out.append(raw)
            else:
                out.append(normalize_schedule_item(raw))
        except RecordError as ex:
            warns.append(_warning(ex, i, record_id(raw), "items"))
    return NormalizeResult(records=tuple(out), warnings=tuple(warns))


def normalize_grouped_schedule(grouped: Any) -> NormalizeResult[ScheduleItem]:
    """Flatten a `{weekday: [item, ...]}` mapping; the mapping key fills a missing dayOfWeek."""
    flat: List[Any] = []
    if isinstance(grouped, dict):
        for day, items in grouped.items():
            if not isinstance(items, list):
                continue
            for raw in items:
                if isinstance(raw, dict) and not _pick(raw, "dayOfWeek", "day_of_week"):
                    raw = dict(raw, dayOfWeek=day)
                flat.append(raw)
    return normalize_schedule_items(flat)
