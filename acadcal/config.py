# acadcal/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from .util.tz import normalize_tz_name

GROUP_ORDERS = ("date", "insertion")


@dataclass(frozen=True)
class LayoutConfig:
    # Timeline window used when there is nothing to lay out.
    default_start_hour: int = 7
    default_end_hour: int = 18
    # Whole hours of breathing room around the earliest start / latest end.
    window_padding_hours: int = 1
    # Floor for rendered item height, in percent of the window.
    min_height_percent: float = 8.0
    # Month cells show this many events before "+N more".
    max_cell_events: int = 3
    refresh_seconds: float = 60.0
    group_order: str = "date"
    tz: str = "local"

    @classmethod
    def from_dict(cls, cfg: Optional[Mapping[str, Any]]) -> "LayoutConfig":
        """Build a config from a loose mapping; bad or missing values keep defaults."""
        base = cls()
        if not isinstance(cfg, Mapping):
            return base

        def _int(key: str, default: int, lo: int, hi: int) -> int:
            v = cfg.get(key)
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                return default
            return max(lo, min(hi, int(v)))

        def _float(key: str, default: float, lo: float) -> float:
            v = cfg.get(key)
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                return default
            return max(lo, float(v))

        start = _int("default_start_hour", base.default_start_hour, 0, 23)
        end = _int("default_end_hour", base.default_end_hour, 1, 24)
        if end <= start:
            start, end = base.default_start_hour, base.default_end_hour

        order = str(cfg.get("group_order") or base.group_order).strip().lower()
        if order not in GROUP_ORDERS:
            order = base.group_order

        return cls(
            default_start_hour=start,
            default_end_hour=end,
            window_padding_hours=_int("window_padding_hours", base.window_padding_hours, 0, 12),
            min_height_percent=_float("min_height_percent", base.min_height_percent, 0.0),
            max_cell_events=_int("max_cell_events", base.max_cell_events, 0, 1000),
            refresh_seconds=_float("refresh_seconds", base.refresh_seconds, 1.0),
            group_order=order,
            tz=normalize_tz_name(cfg.get("tz") if isinstance(cfg.get("tz"), str) else None),
        )

    @classmethod
    def from_env(cls, base: Optional["LayoutConfig"] = None) -> "LayoutConfig":
        """Overlay ACADCAL_* environment variables on `base` (defaults if None)."""
        cfg: Dict[str, Any] = dict((base or cls()).to_dict())

        tz = os.getenv("ACADCAL_TZ")
        if tz:
            cfg["tz"] = tz
        order = os.getenv("ACADCAL_GROUP_ORDER")
        if order:
            cfg["group_order"] = order
        for env_key, key in (("ACADCAL_MIN_HEIGHT", "min_height_percent"), ("ACADCAL_REFRESH_SECONDS", "refresh_seconds")):
            raw = (os.getenv(env_key) or "").strip()
            if not raw:
                continue
            try:
                cfg[key] = float(raw)
            except ValueError:
                continue

        return cls.from_dict(cfg)

    def with_overrides(self, **kwargs: Any) -> "LayoutConfig":
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_start_hour": self.default_start_hour,
            "default_end_hour": self.default_end_hour,
            "window_padding_hours": self.window_padding_hours,
            "min_height_percent": self.min_height_percent,
            "max_cell_events": self.max_cell_events,
            "refresh_seconds": self.refresh_seconds,
            "group_order": self.group_order,
            "tz": self.tz,
        }


DEFAULT_CONFIG = LayoutConfig()


def resolve_config(config: Optional[LayoutConfig]) -> LayoutConfig:
    return config if isinstance(config, LayoutConfig) else DEFAULT_CONFIG
