"""Snake body, heading and movement."""

import itertools
from collections import deque
from typing import Iterable, Optional

from .constants import CELL, DIRECTIONS, OPPOSITES, START_DIRECTION
from .grid import Cell


class Snake:
    """
    A snake on the board.

    Attributes:
        cell: size of one grid cell in pixels
        positions: deque of (x, y) from head at index 0 to tail at the end
        direction: current heading ("up", "down", "left", "right")
        locked: whether a heading change was already accepted this tick
    """

    def __init__(self, positions: Iterable[Cell], direction: str = START_DIRECTION, cell: int = CELL):
        self.cell = cell
        self.positions: deque[Cell] = deque(positions)
        self.direction = direction if direction in DIRECTIONS else START_DIRECTION
        self.locked = False
        self._dropped_tail: Optional[Cell] = None

    @property
    def head(self) -> Cell:
        return self.positions[0]

    @property
    def length(self) -> int:
        return len(self.positions)

    @property
    def segments(self) -> list[Cell]:
        return list(self.positions)

    def occupies(self, cell: Cell) -> bool:
        return cell in self.positions

    def set_direction(self, direction: str) -> bool:
        """Accept a new heading unless it reverses the current one or the lock is held."""
        if self.locked or direction not in DIRECTIONS:
            return False
        if OPPOSITES[direction] == self.direction:
            return False
        self.direction = direction
        self.locked = True
        return True

    def unlock(self):
        self.locked = False

    def reset_to(self, cell: Cell, direction: str = START_DIRECTION):
        self.positions = deque([cell])
        self.direction = direction if direction in DIRECTIONS else START_DIRECTION
        self.locked = False
        self._dropped_tail = None

    def next_head(self) -> Cell:
        dx, dy = DIRECTIONS.get(self.direction, (0, 0))
        hx, hy = self.head
        return hx + dx * self.cell, hy + dy * self.cell

    def advance(self, grow: bool = False):
        self.positions.appendleft(self.next_head())
        if grow:
            self._dropped_tail = None
        else:
            self._dropped_tail = self.positions.pop()

    def grow(self):
        """Re-attach the tail dropped by the last advance."""
        if self._dropped_tail is not None:
            self.positions.append(self._dropped_tail)
            self._dropped_tail = None
        else:
            self.positions.append(self.positions[-1])

    def shrink(self, n: int):
        for _ in range(min(max(0, n), len(self.positions) - 1)):
            self.positions.pop()

    def apply_wrap(self, width: int, height: int):
        x, y = self.head
        if x < 0:
            x = width - self.cell
        elif x >= width:
            x = 0
        if y < 0:
            y = height - self.cell
        elif y >= height:
            y = 0
        self.positions[0] = (x, y)

    def is_out_of_bounds(self, width: int, height: int) -> bool:
        x, y = self.head
        return x < 0 or x >= width or y < 0 or y >= height

    def hit_self(self) -> bool:
        head = self.positions[0]
        return head in itertools.islice(self.positions, 1, None)

    def __repr__(self):
        return f"<Snake head={self.head} length={self.length} direction={self.direction}>"
