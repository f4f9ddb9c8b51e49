"""acadcal.api

Stable *library* entrypoint for acadcal.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

from acadcal.clock import FixedClock, NowSampler, SteppedClock, SystemClock
from acadcal.config import LayoutConfig
from acadcal.export import calendar_view_to_dict, layout_to_dict, schedule_view_to_dict
from acadcal.filters import FilterError, ItemFilter
from acadcal.grouped_list import build_grouped_list
from acadcal.model import DataWarning, Event, ScheduleItem
from acadcal.month_grid import build_month_grid, month_distinct_events
from acadcal.normalize import normalize_events, normalize_grouped_schedule, normalize_schedule_items
from acadcal.options import effective_day, filter_options, navigate_day, schedule_stats
from acadcal.palette import color_index, event_type_config
from acadcal.timeline import (
    TimelineSession,
    compute_time_window,
    layout_timeline,
    now_marker_position,
    position_percent,
)
from acadcal.validate import RecordError
from acadcal.views import build_calendar_view, build_schedule_view
from acadcal.week_grid import build_week_grid

JsonPath = Union[str, Path]

# Envelope keys the host APIs wrap record lists in, most specific first.
_ENVELOPE_KEYS = ("events", "items", "schedule", "data")


def _unwrap(obj: Any) -> Any:
    if isinstance(obj, dict):
        for k in _ENVELOPE_KEYS:
            if k in obj:
                return _unwrap(obj[k])
    return obj


def load_records_from_json(path: JsonPath) -> Union[List[Any], dict]:
    """Read raw records from a JSON file.

    Accepts a bare list, a `{weekday: [...]}` schedule mapping, or either of
    those wrapped in an `events` / `items` / `schedule` / `data` envelope.
    Raises ValueError when the file holds anything else.
    """
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8"))
    recs = _unwrap(obj)
    if isinstance(recs, list):
        return recs
    if isinstance(recs, dict) and recs and all(isinstance(v, list) for v in recs.values()):
        return recs
    raise ValueError(f"{p}: expected a list of records or a weekday mapping; got {type(recs).__name__}")


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
# Prefer append-only unless you are intentionally reshaping the public surface.
_PUBLIC_EXPORTS = (
    "DataWarning",
    "Event",
    "FilterError",
    "FixedClock",
    "ItemFilter",
    "LayoutConfig",
    "NowSampler",
    "RecordError",
    "ScheduleItem",
    "SteppedClock",
    "SystemClock",
    "TimelineSession",
    "build_calendar_view",
    "build_grouped_list",
    "build_month_grid",
    "build_schedule_view",
    "build_week_grid",
    "calendar_view_to_dict",
    "color_index",
    "compute_time_window",
    "effective_day",
    "event_type_config",
    "filter_options",
    "layout_timeline",
    "layout_to_dict",
    "load_records_from_json",
    "month_distinct_events",
    "navigate_day",
    "normalize_events",
    "normalize_grouped_schedule",
    "normalize_schedule_items",
    "now_marker_position",
    "position_percent",
    "schedule_stats",
    "schedule_view_to_dict",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
