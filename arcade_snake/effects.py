"""Temporary, revertible game modifiers."""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from .scheduler import Handle

logger = logging.getLogger(__name__)


class EffectSlot(Enum):
    APPLE_MULTIPLIER = "apple_multiplier"
    TICK_INTERVAL = "tick_interval"
    CONTROL_POLARITY = "control_polarity"


class EffectScheduler:
    """
    One pending restore per slot.

    ``apply`` sets the live value right away and schedules a restore to the
    slot's baseline. The baseline is evaluated when the restore fires, so a
    speed baseline tracks the score reached during the effect window.
    Re-applying a slot cancels its pending restore first.
    """

    def __init__(self, scheduler):
        self.scheduler = scheduler
        self._slots: dict[EffectSlot, tuple[Callable[[Any], None], Callable[[], Any]]] = {}
        self._pending: dict[EffectSlot, Handle] = {}

    def register(self, slot: EffectSlot, setter: Callable[[Any], None], baseline: Callable[[], Any]):
        self._slots[slot] = (setter, baseline)

    def apply(self, slot: EffectSlot, value, duration_ms: float):
        if slot not in self._slots:
            return
        self.cancel(slot)
        setter, _ = self._slots[slot]
        setter(value)
        logger.debug("effect %s -> %r for %sms", slot.value, value, duration_ms)
        self._pending[slot] = self.scheduler.call_later(duration_ms, lambda: self._restore(slot))

    def is_active(self, slot: EffectSlot) -> bool:
        return slot in self._pending

    def cancel(self, slot: EffectSlot):
        handle: Optional[Handle] = self._pending.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def clear(self):
        for slot in list(self._pending):
            self.cancel(slot)

    def _restore(self, slot: EffectSlot):
        self._pending.pop(slot, None)
        setter, baseline = self._slots[slot]
        value = baseline()
        logger.debug("effect %s restored to %r", slot.value, value)
        setter(value)
