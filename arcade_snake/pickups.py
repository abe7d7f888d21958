"""Timed bonus/malus pickups: catalog, spawning, expiry and collision."""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

from .constants import NEAR_FOOD_RADIUS, SPAWN_CHANCE
from .grid import Board, Cell
from .models import Pickup, PickupKind

logger = logging.getLogger(__name__)

K = TypeVar("K")


@dataclass(frozen=True)
class PickupSpec:
    name: str
    color: str
    description: str
    is_malus: bool
    spawns_near_food: bool
    effect_ms: int = 0
    lifetime_ms: int = 5000


PICKUP_CATALOG: dict[PickupKind, PickupSpec] = {
    PickupKind.GOLD: PickupSpec(
        name="Golden apple", color="gold", description="+50 points",
        is_malus=False, spawns_near_food=False,
    ),
    PickupKind.EXP: PickupSpec(
        name="XP boost", color="blue", description="Apples are worth double",
        is_malus=False, spawns_near_food=False, effect_ms=5000,
    ),
    PickupKind.MALUS: PickupSpec(
        name="Malus", color="black", description="-30 points and one segment lost",
        is_malus=True, spawns_near_food=True,
    ),
    PickupKind.POISON: PickupSpec(
        name="Poison", color="purple", description="-50 points and two segments lost",
        is_malus=True, spawns_near_food=True,
    ),
    PickupKind.FREEZE: PickupSpec(
        name="Freeze", color="cyan", description="The snake slows down",
        is_malus=True, spawns_near_food=True, effect_ms=4000,
    ),
    PickupKind.REVERSE: PickupSpec(
        name="Reversed controls", color="green", description="Directions are inverted",
        is_malus=True, spawns_near_food=True, effect_ms=5000,
    ),
}

DEFAULT_WEIGHTS: tuple[tuple[PickupKind, float], ...] = (
    (PickupKind.GOLD, 0.10),
    (PickupKind.EXP, 0.25),
    (PickupKind.MALUS, 0.25),
    (PickupKind.FREEZE, 0.40),
)

HARDCORE_WEIGHTS: tuple[tuple[PickupKind, float], ...] = (
    (PickupKind.MALUS, 0.40),
    (PickupKind.POISON, 0.20),
    (PickupKind.FREEZE, 0.15),
    (PickupKind.REVERSE, 0.15),
    (PickupKind.EXP, 0.08),
    (PickupKind.GOLD, 0.02),
)


class PickupEffects(Protocol):
    def add_score(self, delta: int) -> None: ...

    def set_apple_multiplier_for(self, multiplier: int, ms: int) -> None: ...

    def shrink(self, n: int) -> None: ...

    def slow_for(self, ms: int) -> None: ...

    def reverse_controls_for(self, ms: int) -> None: ...


def weighted_choice(weights: Sequence[tuple[K, float]], rng: random.Random) -> Optional[K]:
    """Pick a key with probability ``weight / total``; None if the total is not positive."""
    total = sum(w for _, w in weights)
    if not weights or total <= 0:
        return None
    r = rng.random() * total
    acc = 0.0
    for key, w in weights:
        acc += w
        if r < acc:
            return key
    return weights[-1][0]


class BonusSpawner:
    """Keeps at most one live pickup on the board."""

    def __init__(self, board: Board, rng: Optional[random.Random] = None,
                 catalog: Optional[dict[PickupKind, PickupSpec]] = None):
        self.board = board
        self.rng = rng or random.Random()
        self.catalog = catalog if catalog is not None else PICKUP_CATALOG
        self.items: list[Pickup] = []

    @property
    def positions(self) -> list[Cell]:
        return [it.position for it in self.items]

    def clear(self):
        self.items.clear()

    def tick(self, now: float, weights: Sequence[tuple[PickupKind, float]],
             food_pos: Optional[Cell] = None, occupied: Iterable[Cell] = (),
             spawn_chance: float = SPAWN_CHANCE, near_radius: int = NEAR_FOOD_RADIUS) -> Optional[Pickup]:
        expired = [it for it in self.items if it.expires_at <= now]
        if expired:
            self.items = [it for it in self.items if it.expires_at > now]
            logger.debug("expired pickups: %s", [it.kind.value for it in expired])

        if self.items:
            return None
        if self.rng.random() >= spawn_chance:
            return None

        kind = weighted_choice(weights, self.rng)
        if kind is None:
            return None

        occupied = list(occupied)
        spec = self.catalog.get(kind)
        if spec is not None and spec.spawns_near_food and food_pos is not None:
            pos = self._random_near(food_pos, near_radius, occupied)
        else:
            pos = self._random_free_cell(occupied)
        return self._spawn(kind, pos, now)

    def apply_if_collision(self, head: Cell, effects: PickupEffects) -> bool:
        for i, it in enumerate(self.items):
            if it.position == head:
                self._apply_effect(it.kind, effects)
                del self.items[i]
                return True
        return False

    def _spawn(self, kind: PickupKind, pos: Cell, now: float) -> Pickup:
        spec = self.catalog.get(kind)
        lifetime = spec.lifetime_ms if spec is not None else 5000
        item = Pickup(kind=kind, position=pos, expires_at=now + lifetime)
        self.items.append(item)
        logger.debug("spawned %s at %s", kind.value, pos)
        return item

    def _random_free_cell(self, occupied: list[Cell]) -> Cell:
        return self.board.random_free_cell(self.rng, occupied, fallback=self.board.center)

    def _random_near(self, center: Cell, radius: int, occupied: list[Cell]) -> Cell:
        candidates = self.board.free_cells_around(center, radius, occupied)
        if not candidates:
            return self._random_free_cell(occupied)
        return candidates[int(self.rng.random() * len(candidates))]

    def _effect_ms(self, kind: PickupKind, default: int) -> int:
        spec = self.catalog.get(kind)
        return spec.effect_ms if spec is not None and spec.effect_ms else default

    def _apply_effect(self, kind: PickupKind, effects: PickupEffects):
        if kind is PickupKind.GOLD:
            effects.add_score(50)
        elif kind is PickupKind.EXP:
            effects.set_apple_multiplier_for(2, self._effect_ms(kind, 5000))
        elif kind is PickupKind.MALUS:
            effects.add_score(-30)
            effects.shrink(1)
        elif kind is PickupKind.POISON:
            effects.add_score(-50)
            effects.shrink(2)
        elif kind is PickupKind.FREEZE:
            effects.slow_for(self._effect_ms(kind, 4000))
        elif kind is PickupKind.REVERSE:
            effects.reverse_controls_for(self._effect_ms(kind, 5000))
