# acadcal/clock.py
from __future__ import annotations

import datetime as dt
import threading
from typing import Callable, Optional, Protocol

from .util.console import eprint, obs_enabled
from .util.tz import now_local, resolve_tz


class Clock(Protocol):
    def now(self) -> dt.datetime: ...


class SystemClock:
    """Real wall clock in the configured zone (civil fields, tzinfo dropped)."""

    def __init__(self, tz: Optional[str] = "local") -> None:
        self.tz_name = tz or "local"
        self._tz = resolve_tz(self.tz_name)

    def now(self) -> dt.datetime:
        return now_local(self._tz)


class FixedClock:
    def __init__(self, moment: dt.datetime) -> None:
        self.moment = moment

    def now(self) -> dt.datetime:
        return self.moment


class SteppedClock:
    """Returns `start`, then advances by `step` on every read."""

    def __init__(self, start: dt.datetime, step: dt.timedelta = dt.timedelta(minutes=1)) -> None:
        self._next = start
        self.step = step

    def now(self) -> dt.datetime:
        cur = self._next
        self._next = cur + self.step
        return cur


def current_minutes(clock: Clock) -> int:
    n = clock.now()
    return n.hour * 60 + n.minute


def today(clock: Clock) -> dt.date:
    return clock.now().date()


TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


class NowSampler:
    """Samples "minutes since midnight" from `clock` every `interval` seconds.

    `start()` takes one sample right away and arms a one-shot timer that
    re-arms itself after each tick. `stop()` cancels the pending timer and
    may be called from inside the callback; a tick already running when
    `stop()` returns still finishes, but nothing is re-armed.
    """

    def __init__(
        self,
        clock: Clock,
        callback: Callable[[int], None],
        interval: float = 60.0,
        *,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.clock = clock
        self.callback = callback
        self.interval = float(interval)
        self.last_sample: Optional[int] = None
        self._timer_factory = timer_factory or threading.Timer
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> int:
        sample = current_minutes(self.clock)
        self.last_sample = sample
        self.callback(sample)
        return sample

    def _arm(self) -> None:
        t = self._timer_factory(self.interval, self._fire)
        t.daemon = True
        self._timer = t
        t.start()

    def _fire(self) -> None:
        # The callback runs unlocked so it may call stop() itself.
        with self._lock:
            if not self._running:
                return
        try:
            self.tick()
        finally:
            with self._lock:
                if self._running:
                    self._arm()

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
        if obs_enabled():
            eprint(f"[acadcal.clock] INFO: now sampler started (interval={self.interval:g}s)")
        try:
            self.tick()
        except Exception:
            with self._lock:
                self._running = False
            raise
        with self._lock:
            if self._running and self._timer is None:
                self._arm()

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if obs_enabled():
            eprint("[acadcal.clock] INFO: now sampler stopped")

    def __enter__(self) -> "NowSampler":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
