# acadcal/timeline.py
from __future__ import annotations

import math
import threading
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .clock import Clock, NowSampler, SystemClock, TimerFactory, current_minutes
from .config import LayoutConfig, resolve_config
from .model import DataWarning, PositionedItem, Record, TimelineEntry, TimelineLayout, TimeWindow
from .util.console import eprint, obs_enabled
from .util.timeparse import InvalidTimeFormat, minutes_to_hhmm, time_to_minutes

TimeLike = Union[str, int]

# (item, start_minutes, end_minutes)
Placed = Tuple[Record, int, int]


def _item_minutes(item: Record) -> Tuple[int, int]:
    start = getattr(item, "start_time", None)
    end = getattr(item, "end_time", None)
    if not start or not end:
        raise InvalidTimeFormat(f"missing startTime/endTime ({start!r}, {end!r})")
    return time_to_minutes(start), time_to_minutes(end)


def sanitize_items(items: Sequence[Record]) -> Tuple[List[Placed], List[DataWarning]]:
    """Split items into placeable (item, start, end) triples and warnings.

    Malformed times and empty/inverted ranges are dropped; one bad item never
    blanks the rest of the timeline.
    """
    placed: List[Placed] = []
    warns: List[DataWarning] = []
    for i, item in enumerate(items or ()):
        rid = getattr(item, "id", None)
        try:
            s, e = _item_minutes(item)
        except InvalidTimeFormat as ex:
            warns.append(DataWarning(kind="invalid_time_format", record_id=rid, message=str(ex), index=i))
            continue
        if e <= s:
            warns.append(
                DataWarning(
                    kind="invalid_range",
                    record_id=rid,
                    message=f"endTime {minutes_to_hhmm(e)} must be after startTime {minutes_to_hhmm(s)}",
                    index=i,
                )
            )
            continue
        placed.append((item, s, e))
    if warns and obs_enabled():
        for w in warns:
            eprint(f"[acadcal.timeline] WARN: skipped id={w.record_id!r}: {w.message}")
    return placed, warns


def _window_from_minutes(min_start: int, max_end: int, cfg: LayoutConfig) -> TimeWindow:
    pad = int(cfg.window_padding_hours)
    start_hour = max(0, min_start // 60 - pad)
    end_hour = min(24, math.ceil(max_end / 60) + pad)
    return TimeWindow(start_hour=start_hour, end_hour=end_hour, total_minutes=(end_hour - start_hour) * 60)


def default_window(config: Optional[LayoutConfig] = None) -> TimeWindow:
    cfg = resolve_config(config)
    return TimeWindow(
        start_hour=cfg.default_start_hour,
        end_hour=cfg.default_end_hour,
        total_minutes=(cfg.default_end_hour - cfg.default_start_hour) * 60,
    )


def compute_time_window(items: Sequence[Record], config: Optional[LayoutConfig] = None) -> TimeWindow:
    """Hour-aligned window around the items, padded on both sides and clamped to [0, 24]."""
    placed, _warns = sanitize_items(items)
    return _window_for(placed, resolve_config(config))


def _window_for(placed: Sequence[Placed], cfg: LayoutConfig) -> TimeWindow:
    if not placed:
        return default_window(cfg)
    return _window_from_minutes(min(p[1] for p in placed), max(p[2] for p in placed), cfg)


def _as_minutes(t: TimeLike) -> int:
    if isinstance(t, bool):
        raise TypeError("time must be 'HH:MM' or int minutes")
    if isinstance(t, int):
        return t
    return time_to_minutes(t)


def position_percent(t: TimeLike, window: TimeWindow) -> float:
    """Vertical offset of `t` inside `window`, 0 at start_hour and 100 at end_hour."""
    return (_as_minutes(t) - window.start_minutes) / window.total_minutes * 100


def now_marker_position(current: int, window: TimeWindow) -> float:
    """Marker offset for "now", or -1 when it falls outside the window."""
    if current < window.start_minutes or current > window.end_minutes:
        return -1
    return position_percent(int(current), window)


def status_for(start: int, end: int, current: int) -> Tuple[bool, bool]:
    # now is half-open [start, end); past only strictly after end
    return (start <= current < end), (current > end)


def item_status(item: Record, current: int) -> Tuple[bool, bool]:
    """(is_now, is_past) for one item; raises InvalidTimeFormat on bad times."""
    s, e = _item_minutes(item)
    return status_for(s, e, current)


def _position(item: Record, s: int, e: int, window: TimeWindow, current: int, cfg: LayoutConfig) -> PositionedItem:
    top = position_percent(s, window)
    # height floor keeps zero-length items visible and clickable
    height = max(position_percent(e, window) - top, cfg.min_height_percent)
    is_now, is_past = status_for(s, e, current)
    return PositionedItem(item=item, top_percent=top, height_percent=height, is_now=is_now, is_past=is_past)


def position_item(item: Record, window: TimeWindow, current: int, config: Optional[LayoutConfig] = None) -> PositionedItem:
    s, e = _item_minutes(item)
    return _position(item, s, e, window, current, resolve_config(config))


def layout_timeline(
    items: Sequence[Record],
    current: int,
    *,
    show_grid: bool = False,
    config: Optional[LayoutConfig] = None,
) -> TimelineLayout:
    """Lay out one day's items.

    Grid mode positions each item by percentage inside the computed window.
    List mode returns the items sorted by start time (stable on ties) with
    their now/past status only.
    """
    cfg = resolve_config(config)
    placed, warns = sanitize_items(items)
    window = _window_for(placed, cfg)
    marker = now_marker_position(current, window)

    if show_grid:
        positioned = [_position(item, s, e, window, current, cfg) for item, s, e in placed]
        return TimelineLayout(
            window=window,
            current_minutes=int(current),
            now_position=marker,
            mode="grid",
            items=tuple(positioned),
            warnings=tuple(warns),
        )

    entries = []
    for item, s, e in sorted(placed, key=lambda p: p[1]):
        is_now, is_past = status_for(s, e, current)
        entries.append(TimelineEntry(item=item, start_minutes=s, is_now=is_now, is_past=is_past))
    return TimelineLayout(
        window=window,
        current_minutes=int(current),
        now_position=marker,
        mode="list",
        entries=tuple(entries),
        warnings=tuple(warns),
    )


def time_slots(window: TimeWindow) -> List[str]:
    return [f"{h:02d}:00" for h in range(window.start_hour, window.end_hour + 1) if h < 24]


def hour_slots(window: TimeWindow, current: int) -> List[Tuple[str, bool]]:
    """Hour rows for the grid gutter, flagging the row that contains "now"."""
    cur_hour = int(current) // 60
    return [(slot, int(slot[:2]) == cur_hour) for slot in time_slots(window)]


class TimelineSession:
    """A live timeline: fixed items, a clock, and a periodically refreshed layout.

    `start()` begins sampling the clock every `config.refresh_seconds`;
    `stop()` must be called when the view goes away. While stopped, sampler
    ticks are ignored and `layout` keeps its last value.
    """

    def __init__(
        self,
        items: Sequence[Record],
        *,
        show_grid: bool = False,
        clock: Optional[Clock] = None,
        config: Optional[LayoutConfig] = None,
        on_update: Optional[Callable[[TimelineLayout], None]] = None,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self.config = resolve_config(config)
        self.items = tuple(items or ())
        self.show_grid = bool(show_grid)
        self.clock = clock or SystemClock(self.config.tz)
        self.on_update = on_update
        self._lock = threading.Lock()
        self._active = False
        self._sampler = NowSampler(
            self.clock,
            self._on_sample,
            interval=self.config.refresh_seconds,
            timer_factory=timer_factory,
        )
        self.layout = layout_timeline(
            self.items, current_minutes(self.clock), show_grid=self.show_grid, config=self.config
        )

    @property
    def active(self) -> bool:
        return self._active

    def _on_sample(self, minutes: int) -> None:
        with self._lock:
            if not self._active:
                return
            self.layout = layout_timeline(self.items, minutes, show_grid=self.show_grid, config=self.config)
            layout = self.layout
        if self.on_update is not None:
            self.on_update(layout)

    def refresh(self) -> TimelineLayout:
        """Take a fresh sample now (no-op while stopped)."""
        if self._active:
            self._sampler.tick()
        return self.layout

    def start(self) -> "TimelineSession":
        with self._lock:
            self._active = True
        self._sampler.start()
        return self

    def stop(self) -> None:
        with self._lock:
            self._active = False
        self._sampler.stop()

    def __enter__(self) -> "TimelineSession":
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.stop()
