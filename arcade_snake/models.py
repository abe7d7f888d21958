"""Data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .grid import Cell


class GamePhase(Enum):
    MENU = "menu"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class PickupKind(Enum):
    GOLD = "gold"
    EXP = "exp"
    MALUS = "malus"
    POISON = "poison"
    FREEZE = "freeze"
    REVERSE = "reverse"


@dataclass
class Pickup:
    kind: PickupKind
    position: Cell
    expires_at: float


@dataclass
class GameSummary:
    score: int
    mode: str
    mode_title: str
    user: str
    elapsed_seconds: Optional[int] = None
    remaining_seconds: Optional[int] = None
