from __future__ import annotations

import argparse
import datetime as dt
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api import load_records_from_json
from .clock import FixedClock, SystemClock
from .config import GROUP_ORDERS, LayoutConfig
from .export import calendar_view_to_dict, schedule_view_to_dict, warnings_to_list
from .filters import FilterError, ItemFilter
from .model import WEEKDAYS_MON_FIRST
from .normalize import normalize_events, normalize_grouped_schedule, normalize_schedule_items
from .options import navigate_day
from .util.dates import parse_date_yyyy_mm_dd, parse_year_month
from .util.timeparse import InvalidTimeFormat, parse_hhmm
from .util.tz import normalize_tz_name, resolve_tz, today_date
from .views import build_calendar_view, build_schedule_view

PROG = "acadcal"


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{PROG}] ERROR: {msg}", file=sys.stderr)
    return rc


def _shared(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--in", dest="in_json", required=True, help="Input records JSON path")
    ap.add_argument("--filter", default="", help="Filter expression, e.g. 'subject:SUB1 type:exam algebra'")
    ap.add_argument("--today", default=None, help="Override today's date YYYY-MM-DD (default: today in --tz)")
    ap.add_argument(
        "--tz",
        default=os.getenv("ACADCAL_TZ", "local"),
        help="Timezone that 'today' and 'now' are read in (default: env ACADCAL_TZ or 'local')",
    )
    ap.add_argument("--out", default=None, help="Output JSON path (default: stdout)")
    ap.add_argument("--pretty", action="store_true", help="Pretty JSON output")


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog=PROG, description="Lay out academic calendar events and weekly timetables as JSON.")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("month", help="42-cell month grid")
    _shared(p)
    p.add_argument("--month", default=None, help="Month YYYY-MM (default: month of --today)")

    p = sub.add_parser("week", help="Sunday-first week columns")
    _shared(p)
    p.add_argument("--date", default=None, help="Any date in the week YYYY-MM-DD (default: --today)")

    p = sub.add_parser("list", help="Events of one month grouped by start date")
    _shared(p)
    p.add_argument("--month", default=None, help="Month YYYY-MM (default: month of --today)")
    p.add_argument("--type", dest="event_type", default=None, help="Only this event type")
    p.add_argument("--order", choices=GROUP_ORDERS, default=None, help="Group order (default: env ACADCAL_GROUP_ORDER or 'date')")

    p = sub.add_parser("timeline", help="One weekday of the timetable")
    _shared(p)
    p.add_argument("--day", default=None, help="Weekday name (default: today's weekday)")
    p.add_argument("--step", choices=("prev", "next"), default=None, help="Move one day from --day before laying out")
    p.add_argument("--grid", action="store_true", help="Positioned grid instead of the sorted list")
    p.add_argument("--compact", action="store_true", help="Jump to the first day with items when --day is empty")
    p.add_argument("--now", default=None, help="Override the current time HH:MM")

    p = sub.add_parser("check", help="Report data-quality warnings (exit 1 when any)")
    _shared(p)
    p.add_argument("--kind", choices=("events", "schedule"), default="events", help="Record kind in --in")

    return ap


def _write(obj: Dict[str, Any], out: Optional[str], pretty: bool) -> None:
    txt = json.dumps(obj, ensure_ascii=False, indent=2 if pretty else None)
    if not out:
        sys.stdout.write(txt + "\n")
        return
    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(txt + "\n", encoding="utf-8", newline="\n")
    print(f"[{PROG}] OK: wrote {out_path}", file=sys.stderr)


def _as_list(records: Any) -> List[Any]:
    if isinstance(records, dict):
        return [r for v in records.values() for r in v]
    return list(records)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    config = LayoutConfig.from_env()
    tz_name = normalize_tz_name(ns.tz)
    try:
        tzinfo = resolve_tz(tz_name)
    except ValueError as e:
        return _die(f"Invalid --tz value: {e}")
    config = config.with_overrides(tz=tz_name)

    try:
        today = parse_date_yyyy_mm_dd(ns.today) if ns.today else today_date(tzinfo)
    except ValueError as e:
        return _die(f"Invalid --today value: {e}")

    try:
        item_filter = ItemFilter.parse(ns.filter)
    except FilterError as e:
        return _die(str(e))

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing JSON file: {p}")
    try:
        records = load_records_from_json(p)
    except (OSError, ValueError) as e:
        return _die(f"Failed to read records: {p} ({e})")

    if ns.cmd == "check":
        if ns.kind == "schedule":
            res = normalize_grouped_schedule(records) if isinstance(records, dict) else normalize_schedule_items(records)
        else:
            res = normalize_events(_as_list(records))
        _write(
            {"records": len(res.records), "warnings": warnings_to_list(res.warnings)},
            ns.out,
            ns.pretty,
        )
        return 1 if res.warnings else 0

    if ns.cmd == "timeline":
        day = ns.day
        if day is not None:
            day = day.strip().capitalize()
            if day not in WEEKDAYS_MON_FIRST:
                return _die(f"Invalid --day value: {ns.day!r}")
            if ns.step:
                day = navigate_day(day, ns.step)
        if ns.now:
            try:
                hh, mm = parse_hhmm(ns.now)
            except InvalidTimeFormat as e:
                return _die(f"Invalid --now value: {e}")
            clock = FixedClock(dt.datetime.combine(today, dt.time(0, 0)) + dt.timedelta(hours=hh, minutes=mm))
        elif ns.today:
            clock = FixedClock(dt.datetime.combine(today, SystemClock(tz_name).now().time()))
        else:
            clock = SystemClock(tz_name)
        sv = build_schedule_view(
            records,
            day=day,
            item_filter=item_filter,
            clock=clock,
            show_grid=ns.grid,
            compact=ns.compact,
            config=config,
        )
        _write(schedule_view_to_dict(sv), ns.out, ns.pretty)
        return 0

    events = _as_list(records)
    try:
        if ns.cmd in ("month", "list") and ns.month:
            y, m = parse_year_month(ns.month)
            anchor = dt.date(y, m, 1)
        else:
            anchor = today
        if ns.cmd == "month":
            cv = build_calendar_view(events, view="month", anchor=anchor, item_filter=item_filter, today=today, config=config)
        elif ns.cmd == "week":
            anchor = parse_date_yyyy_mm_dd(ns.date) if ns.date else today
            cv = build_calendar_view(events, view="week", anchor=anchor, item_filter=item_filter, today=today, config=config)
        else:
            if ns.event_type:
                item_filter = ItemFilter(**dict(item_filter.as_dict(), event_type=ns.event_type))
            cv = build_calendar_view(
                events, view="list", anchor=anchor, item_filter=item_filter, today=today, order=ns.order, config=config
            )
    except ValueError as e:
        return _die(str(e))

    _write(calendar_view_to_dict(cv), ns.out, ns.pretty)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
