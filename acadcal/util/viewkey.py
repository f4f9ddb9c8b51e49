# acadcal/util/viewkey.py
from __future__ import annotations

from typing import Any, Mapping, Optional


def make_view_key(
    view: str,
    anchor: str,
    filters: Optional[Mapping[str, Any]] = None,
    group_order: str = "date",
    tz: str = "local",
) -> str:
    """Return a stable key for one rendered view (mode + focus + filters).

    Hosts use it to tell whether a cached derived structure still matches
    the current selection. Filter keys are sorted so dict order is irrelevant.
    """
    parts = [str(view), str(anchor), str(group_order), str(tz)]
    for k in sorted((filters or {}).keys()):
        v = (filters or {})[k]
        if v in (None, ""):
            continue
        parts.append(f"{k}={v}")
    raw = "|".join(parts)
    h = 0
    for ch in raw:
        h = (h * 131 + ord(ch)) & 0xFFFFFFFF
    return f"{h:08x}"
