"""Food-seeking bot used to drive headless games."""

import random
from typing import Optional

from .constants import DIRECTIONS, OPPOSITES
from .game import SnakeGame


def choose_direction(game: SnakeGame, rng: Optional[random.Random] = None,
                     intelligence: float = 0.8, mistake_rate: float = 0.0) -> str:
    """Pick a heading that moves toward the apple while avoiding lethal cells.

    intelligence: chance to prefer a move that reduces distance to the apple
    mistake_rate: chance to pick any heading at all, fatal ones included
    """
    rng = rng or random.Random()
    snake = game.snake
    current = snake.direction
    hx, hy = snake.head
    fx, fy = game.food.position
    cell = game.board.cell
    body = set(snake.segments[:-1])

    safe = []
    for d, (dx, dy) in DIRECTIONS.items():
        if OPPOSITES[d] == current:
            continue
        nx, ny = hx + dx * cell, hy + dy * cell
        if game.rules.wraps:
            nx %= game.board.width
            ny %= game.board.height
        elif not game.board.contains((nx, ny)):
            continue
        if (nx, ny) in body:
            continue
        safe.append((d, nx, ny))

    if rng.random() < mistake_rate:
        return rng.choice(list(DIRECTIONS))

    if not safe:
        return current

    if rng.random() < intelligence:
        def dist_to_food(x, y):
            return abs(x - fx) + abs(y - fy)

        current_dist = dist_to_food(hx, hy)
        better = [s for s in safe if dist_to_food(s[1], s[2]) < current_dist]
        if better:
            return rng.choice(better)[0]

    return rng.choice(safe)[0]
