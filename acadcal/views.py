# acadcal/views.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .clock import Clock, SystemClock, current_minutes
from .config import DEFAULT_CONFIG, LayoutConfig, resolve_config
from .filters import ItemFilter
from .grouped_list import build_grouped_list
from .model import (
    CalendarCell,
    DataWarning,
    DateGroup,
    DayColumn,
    Event,
    ScheduleItem,
    TimelineLayout,
    WEEKDAYS_SUN_FIRST,
)
from .month_grid import build_month_grid, month_distinct_events, month_title
from .normalize import normalize_events, normalize_grouped_schedule, normalize_schedule_items
from .options import (
    FilterOptions,
    ScheduleStats,
    default_day,
    effective_day,
    filter_options,
    group_by_weekday,
    schedule_stats,
    total_items,
)
from .timeline import layout_timeline
from .util.dates import civil_date, days_in_month, event_intersects_range, weekday_sun0
from .util.tz import resolve_tz, today_date
from .util.viewkey import make_view_key
from .week_grid import build_week_grid, week_title

CALENDAR_VIEWS = ("month", "week", "list")


@dataclass(frozen=True)
class CalendarView:
    view: str
    anchor: dt.date
    title: str
    view_key: str
    cells: Tuple[CalendarCell, ...] = ()
    columns: Optional[Dict[str, DayColumn]] = None
    groups: Tuple[DateGroup, ...] = ()
    events: Tuple[Event, ...] = ()  # filtered input, before layout
    warnings: Tuple[DataWarning, ...] = ()


@dataclass(frozen=True)
class ScheduleView:
    day: str
    view_key: str
    grouped: Dict[str, Tuple[ScheduleItem, ...]]
    layout: TimelineLayout
    stats: ScheduleStats
    options: FilterOptions
    total: int
    warnings: Tuple[DataWarning, ...] = ()
    config: LayoutConfig = DEFAULT_CONFIG


def _coerce_events(raw: Sequence[Any]) -> Tuple[Tuple[Event, ...], Tuple[DataWarning, ...]]:
    res = normalize_events(list(raw or []))
    return res.records, res.warnings


def _coerce_items(raw: Any) -> Tuple[Tuple[ScheduleItem, ...], Tuple[DataWarning, ...]]:
    if isinstance(raw, dict):
        res = normalize_grouped_schedule(raw)
        return res.records, res.warnings
    res = normalize_schedule_items(list(raw or []))
    return res.records, res.warnings


def _today(today: Optional[dt.date], cfg: LayoutConfig) -> dt.date:
    if today is not None:
        return civil_date(today)
    return today_date(resolve_tz(cfg.tz))


def build_calendar_view(
    raw_events: Sequence[Any],
    *,
    view: str = "month",
    anchor: dt.date,
    item_filter: Optional[ItemFilter] = None,
    today: Optional[dt.date] = None,
    order: Optional[str] = None,
    config: Optional[LayoutConfig] = None,
) -> CalendarView:
    """Normalize, filter, then build the requested calendar layout.

    Filtering happens once, before the builder, so every day bucket and count
    reflects exactly what the user filtered to.
    """
    if view not in CALENDAR_VIEWS:
        raise ValueError(f"view must be one of {CALENDAR_VIEWS}, got {view!r}")
    if not isinstance(anchor, dt.date):
        raise TypeError(f"anchor must be a date, got {type(anchor).__name__}")
    cfg = resolve_config(config)
    anchor = civil_date(anchor)
    flt = item_filter or ItemFilter()

    events, warns = _coerce_events(raw_events)
    events = tuple(e for e in flt.apply(events) if isinstance(e, Event))
    group_order = order or cfg.group_order
    key = make_view_key(view, anchor.isoformat(), flt.as_dict(), group_order=group_order, tz=cfg.tz)

    if view == "month":
        cells = build_month_grid(anchor.year, anchor.month, events, today=_today(today, cfg), config=cfg)
        return CalendarView(
            view=view,
            anchor=anchor,
            title=month_title(anchor.year, anchor.month),
            view_key=key,
            cells=cells,
            events=events,
            warnings=warns,
        )

    if view == "week":
        columns = build_week_grid(anchor, events, today=_today(today, cfg))
        return CalendarView(
            view=view,
            anchor=anchor,
            title=week_title(anchor),
            view_key=key,
            columns=columns,
            events=events,
            warnings=warns,
        )

    first = dt.date(anchor.year, anchor.month, 1)
    last = dt.date(anchor.year, anchor.month, days_in_month(anchor.year, anchor.month))
    in_month = [e for e in events if event_intersects_range(e, first, last)]
    groups = build_grouped_list(in_month, order=group_order, config=cfg)
    return CalendarView(
        view=view,
        anchor=anchor,
        title=month_title(anchor.year, anchor.month),
        view_key=key,
        groups=groups,
        events=events,
        warnings=warns,
    )


def visible_event_count(cv: CalendarView) -> int:
    """Distinct events the view actually places somewhere."""
    if cv.view == "month":
        return len(month_distinct_events(cv.cells))
    if cv.view == "week":
        ids = {ev.id for col in (cv.columns or {}).values() for ev in col.events}
        return len(ids)
    return sum(len(g.events) for g in cv.groups)


def build_schedule_view(
    raw_items: Any,
    *,
    day: Optional[str] = None,
    item_filter: Optional[ItemFilter] = None,
    clock: Optional[Clock] = None,
    show_grid: bool = False,
    compact: bool = False,
    config: Optional[LayoutConfig] = None,
) -> ScheduleView:
    """Weekly timetable for one selected day.

    `raw_items` is either the flat item list or the `{weekday: [items]}`
    mapping served by the schedule directory. Stats and filter options are
    computed from the unfiltered schedule; the day buckets and the timeline
    use the filtered one.
    """
    cfg = resolve_config(config)
    clock = clock or SystemClock(cfg.tz)
    flt = item_filter or ItemFilter()

    items, warns = _coerce_items(raw_items)
    grouped_all = group_by_weekday(items)
    grouped = {d: tuple(i for i in v if isinstance(i, ScheduleItem)) for d, v in flt.apply_grouped(grouped_all).items()}

    now = clock.now()
    selected = day or default_day(WEEKDAYS_SUN_FIRST[weekday_sun0(now.date())])
    shown = effective_day(grouped, selected, compact=compact)

    layout = layout_timeline(grouped.get(shown, ()), now.hour * 60 + now.minute, show_grid=show_grid, config=cfg)
    key = make_view_key("grid" if show_grid else "timeline", shown, flt.as_dict(), tz=cfg.tz)

    return ScheduleView(
        day=shown,
        view_key=key,
        grouped=grouped,
        layout=layout,
        stats=schedule_stats(grouped_all),
        options=filter_options(items),
        total=total_items(grouped),
        warnings=warns + layout.warnings,
        config=cfg,
    )


def refresh_schedule_layout(sv: ScheduleView, clock: Clock, *, config: Optional[LayoutConfig] = None) -> TimelineLayout:
    """Recompute only the timeline of an existing view against a new "now".

    The view's own config is reused unless `config` overrides it.
    """
    return layout_timeline(
        sv.grouped.get(sv.day, ()),
        current_minutes(clock),
        show_grid=(sv.layout.mode == "grid"),
        config=config or sv.config,
    )
