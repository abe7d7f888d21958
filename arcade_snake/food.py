"""Apple placement."""

import random
from typing import Iterable, Optional

from .grid import Board, Cell


class Food:
    def __init__(self, board: Board, rng: Optional[random.Random] = None, position: Cell = (0, 0)):
        self.board = board
        self.rng = rng or random.Random()
        self.position = position

    def respawn(self, occupied: Iterable[Cell] = ()) -> Cell:
        """Move to a random free cell; keeps the current cell on a saturated board."""
        self.position = self.board.random_free_cell(self.rng, occupied, fallback=self.position)
        return self.position

    def respawn_near(self, target: Cell, radius: int = 3, occupied: Iterable[Cell] = ()) -> Cell:
        occupied = list(occupied)
        candidates = self.board.free_cells_around(target, radius, occupied)
        if not candidates:
            return self.respawn(occupied)
        self.position = candidates[int(self.rng.random() * len(candidates))]
        return self.position

    def is_eaten_by(self, head: Cell) -> bool:
        return head == self.position
