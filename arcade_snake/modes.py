"""Game mode definitions."""

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import (
    CHRONO_DURATION, HARDCORE_SPEED, REVERSE_TIMER_BONUS, REVERSE_TIMER_DURATION, START_LIVES,
)
from .models import PickupKind
from .pickups import DEFAULT_WEIGHTS, HARDCORE_WEIGHTS
from .timekeeper import TimerMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeRules:
    key: str
    title: str
    description: str
    rules: tuple[str, ...] = ()
    wraps: bool = True
    fixed_interval: Optional[int] = None
    lives: int = 1
    pickup_weights: tuple[tuple[PickupKind, float], ...] = DEFAULT_WEIGHTS
    timer: TimerMode = TimerMode.NONE
    timer_seconds: int = 0
    food_time_bonus: int = 0

    @property
    def uses_timer(self) -> bool:
        return self.timer is not TimerMode.NONE


GAME_MODES: dict[str, ModeRules] = {
    "classic": ModeRules(
        key="classic",
        title="Classic",
        description="Traditional snake with no time limit.",
        rules=("Each apple = +10 points", "Standard bonuses and maluses", "Any collision ends the game"),
    ),
    "chrono": ModeRules(
        key="chrono",
        title="Chrono",
        description="Score as much as possible before the clock runs out.",
        rules=(f"{CHRONO_DURATION} seconds on the clock", "Each apple = +10 points", "Game ends when time hits 0"),
        timer=TimerMode.COUNTDOWN,
        timer_seconds=CHRONO_DURATION,
    ),
    "lives": ModeRules(
        key="lives",
        title="Lives",
        description="Several lives to make the run last longer.",
        rules=(f"{START_LIVES} lives", "Each apple = +10 points", "A collision costs one life"),
        lives=START_LIVES,
    ),
    "hardcore": ModeRules(
        key="hardcore",
        title="Hardcore",
        description="An extreme challenge for experienced players.",
        rules=(f"Faster start ({HARDCORE_SPEED}ms)", "The board edges are lethal", "Fewer bonuses, more maluses"),
        wraps=False,
        fixed_interval=HARDCORE_SPEED,
        pickup_weights=HARDCORE_WEIGHTS,
    ),
    "reverse-timer": ModeRules(
        key="reverse-timer",
        title="Reverse timer",
        description="The clock runs down, eat apples to extend the game.",
        rules=(
            f"{REVERSE_TIMER_DURATION} seconds to start",
            f"Each apple = +10 points and +{REVERSE_TIMER_BONUS} seconds",
            "Game ends when time runs out",
        ),
        timer=TimerMode.REVERSE,
        timer_seconds=REVERSE_TIMER_DURATION,
        food_time_bonus=REVERSE_TIMER_BONUS,
    ),
}

MODE_LIST = list(GAME_MODES)


def get_mode(key: str) -> ModeRules:
    rules = GAME_MODES.get(key)
    if rules is None:
        logger.warning("unknown mode %r, falling back to classic", key)
        return GAME_MODES["classic"]
    return rules
