"""Board geometry and occupancy helpers."""

import random
from dataclasses import dataclass
from typing import Iterable, Optional

from .constants import BOARD_W, BOARD_H, CELL, MIN_SAMPLE_ATTEMPTS

Cell = tuple[int, int]


def to_cell_set(cells: Iterable[Cell]) -> set[Cell]:
    return {(int(x), int(y)) for x, y in cells}


@dataclass(frozen=True)
class Board:
    """Pixel-sized playfield split into square cells of ``cell`` pixels."""

    width: int = BOARD_W
    height: int = BOARD_H
    cell: int = CELL

    @property
    def cols(self) -> int:
        return self.width // self.cell

    @property
    def rows(self) -> int:
        return self.height // self.cell

    @property
    def center(self) -> Cell:
        return (self.cols // 2) * self.cell, (self.rows // 2) * self.cell

    @property
    def sample_budget(self) -> int:
        return max(MIN_SAMPLE_ATTEMPTS, self.cols * self.rows)

    def contains(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def random_cell(self, rng: random.Random) -> Cell:
        cx = int(rng.random() * self.cols)
        cy = int(rng.random() * self.rows)
        return cx * self.cell, cy * self.cell

    def random_free_cell(self, rng: random.Random, occupied: Iterable[Cell] = (),
                         fallback: Optional[Cell] = None) -> Optional[Cell]:
        """Sample until a cell outside ``occupied`` turns up.

        Gives up after ``sample_budget`` draws and returns ``fallback``.
        """
        blocked = to_cell_set(occupied)
        for _ in range(self.sample_budget):
            cell = self.random_cell(rng)
            if cell not in blocked:
                return cell
        return fallback

    def cells_around(self, center: Cell, radius: int) -> list[Cell]:
        """All board cells within a square ``radius`` (in cells) of ``center``."""
        cx, cy = center
        cells = []
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                cell = (cx + dx * self.cell, cy + dy * self.cell)
                if self.contains(cell):
                    cells.append(cell)
        return cells

    def free_cells_around(self, center: Cell, radius: int, occupied: Iterable[Cell] = ()) -> list[Cell]:
        blocked = to_cell_set(occupied)
        return [c for c in self.cells_around(center, radius) if c not in blocked]
