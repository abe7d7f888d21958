"""Countdown / reverse timer driven by elapsed clock time."""

import logging
from enum import Enum
from typing import Callable, Optional

from .constants import TIMER_TICK_MS
from .scheduler import Handle

logger = logging.getLogger(__name__)


class TimerMode(Enum):
    NONE = "none"
    COUNTDOWN = "countdown"
    REVERSE = "reverse"


class TimeKeeper:
    """
    Counts seconds down from a start value.

    The periodic driver only *samples* the clock: each firing recomputes the
    value as ``start - elapsed`` where elapsed excludes paused spans, so a late
    or skipped driver firing never loses or gains time.

    Attributes:
        mode: NONE while idle, COUNTDOWN (chrono) or REVERSE (reverse timer)
        value: seconds remaining
    """

    def __init__(self, scheduler, tick_ms: int = TIMER_TICK_MS):
        self.scheduler = scheduler
        self.tick_ms = tick_ms
        self.mode = TimerMode.NONE
        self.value = 0
        self._start_value = 0
        self._started_at = 0.0
        self._accum_pause = 0.0
        self._paused_at: Optional[float] = None
        self._driver: Optional[Handle] = None
        self._on_tick: Optional[Callable[[int], None]] = None
        self._on_end: Optional[Callable[[], None]] = None

    def start_countdown(self, seconds: int, on_tick=None, on_end=None):
        self._start(TimerMode.COUNTDOWN, seconds, on_tick, on_end)

    def start_reverse(self, seconds: int, on_tick=None, on_end=None):
        self._start(TimerMode.REVERSE, seconds, on_tick, on_end)

    def stop(self):
        if self._driver is not None:
            self._driver.cancel()
            self._driver = None
        self.mode = TimerMode.NONE
        self._on_tick = None
        self._on_end = None
        self._paused_at = None
        self._accum_pause = 0.0

    @property
    def is_running(self) -> bool:
        return self.mode is not TimerMode.NONE and self._driver is not None

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    def set_paused(self, paused: bool):
        if self.mode is TimerMode.NONE:
            return
        if paused and self._paused_at is None:
            self._paused_at = self.scheduler.now()
        elif not paused and self._paused_at is not None:
            self._accum_pause += self.scheduler.now() - self._paused_at
            self._paused_at = None

    def add(self, delta: int):
        """Add (or remove) seconds; the change survives later recomputation."""
        if self.mode is TimerMode.NONE:
            return
        delta = int(delta)
        self._start_value += delta
        self.value = max(0, self.value + delta)
        self._notify()
        if self.value <= 0:
            self._end()

    def _start(self, mode: TimerMode, seconds: int, on_tick, on_end):
        self.stop()
        self.mode = mode
        self._start_value = max(0, int(seconds))
        self.value = self._start_value
        self._on_tick = on_tick
        self._on_end = on_end
        self._started_at = self.scheduler.now()
        self._accum_pause = 0.0
        self._paused_at = None
        self._notify()
        self._driver = self.scheduler.call_every(self.tick_ms, self._sample)

    def _sample(self):
        if self.mode is TimerMode.NONE or self._paused_at is not None:
            return
        elapsed_ms = self.scheduler.now() - self._started_at - self._accum_pause
        nxt = max(0, self._start_value - int(elapsed_ms // 1000))
        if nxt != self.value:
            self.value = nxt
            self._notify()
            if self.value <= 0:
                self._end()

    def _notify(self):
        if self._on_tick is not None:
            self._on_tick(self.value)

    def _end(self):
        on_end = self._on_end
        self.stop()
        logger.debug("timer reached zero")
        if on_end is not None:
            on_end()
