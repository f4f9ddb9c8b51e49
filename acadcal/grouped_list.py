# acadcal/grouped_list.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .config import GROUP_ORDERS, LayoutConfig, resolve_config
from .model import DateGroup, Event
from .util.dates import civil_date


def build_grouped_list(
    events: Sequence[Event],
    *,
    event_type: Optional[str] = None,
    order: Optional[str] = None,
    config: Optional[LayoutConfig] = None,
) -> Tuple[DateGroup, ...]:
    """Group events by civil start date for the chronological list view.

    order="date" sorts the groups by date; order="insertion" keeps groups in
    the order their first event was seen, which is only chronological when the
    input already is. Events inside a group always keep input order.
    """
    order = (order or resolve_config(config).group_order).strip().lower()
    if order not in GROUP_ORDERS:
        raise ValueError(f"order must be one of {GROUP_ORDERS}, got {order!r}")

    buckets: Dict[str, List[Event]] = {}
    dates = {}
    for ev in events or ():
        if event_type and ev.event_type != event_type:
            continue
        d = civil_date(ev.start_date)
        key = d.isoformat()
        if key not in buckets:
            buckets[key] = []
            dates[key] = d
        buckets[key].append(ev)

    keys = list(buckets.keys())
    if order == "date":
        keys.sort()

    return tuple(DateGroup(key=k, date=dates[k], events=tuple(buckets[k])) for k in keys)


def group_counts(groups: Sequence[DateGroup]) -> Dict[str, int]:
    return {g.label: len(g.events) for g in groups}


def count_label(n: int) -> str:
    return f"{n} event" if n == 1 else f"{n} events"
