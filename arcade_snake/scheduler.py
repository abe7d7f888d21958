"""Cancellable deferred callbacks on a millisecond clock.

The game never sleeps or blocks. Everything that happens "later" (the tick
driver, the countdown driver, effect restores) is a callback registered here
and cancelled through the returned handle.

Two clocks are provided:

* ``LoopScheduler`` runs on an asyncio event loop, for live play.
* ``ManualScheduler`` keeps a virtual clock that only moves when
  ``advance()`` is called, for headless simulation and tests.
"""

import asyncio
import heapq
import itertools
from typing import Callable, Optional


class Handle:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class _LoopHandle(Handle):
    def __init__(self):
        super().__init__()
        self.timer: Optional[asyncio.TimerHandle] = None

    def cancel(self):
        super().cancel()
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class LoopScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        handle = _LoopHandle()

        def fire():
            handle.timer = None
            if not handle.cancelled:
                callback()

        handle.timer = self.loop.call_later(max(0.0, delay_ms) / 1000.0, fire)
        return handle

    def call_every(self, interval_ms: float, callback: Callable[[], None]) -> Handle:
        handle = _LoopHandle()
        period = max(1.0, interval_ms) / 1000.0

        def fire():
            if handle.cancelled:
                return
            callback()
            if not handle.cancelled:
                handle.timer = self.loop.call_later(period, fire)

        handle.timer = self.loop.call_later(period, fire)
        return handle


class _Task(Handle):
    def __init__(self, due: float, callback: Callable[[], None], interval: Optional[float]):
        super().__init__()
        self.due = due
        self.callback = callback
        self.interval = interval


class ManualScheduler:
    """Virtual clock; callbacks fire in due order while ``advance()`` runs."""

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._queue: list[tuple[float, int, _Task]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Handle:
        return self._push(_Task(self._now + max(0.0, delay_ms), callback, None))

    def call_every(self, interval_ms: float, callback: Callable[[], None]) -> Handle:
        interval = max(1.0, interval_ms)
        return self._push(_Task(self._now + interval, callback, interval))

    @property
    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, ms: float):
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = due
            task.callback()
            if task.interval is not None and not task.cancelled:
                task.due = due + task.interval
                self._push(task)
        self._now = target

    def _push(self, task: _Task) -> _Task:
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task
