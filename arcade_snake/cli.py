"""Command line entry point: run the server or a headless game."""

import argparse
import logging
import random
import sys
from dataclasses import asdict
from typing import Optional

from .autopilot import choose_direction
from .config import configure_logging, load_settings
from .constants import OPPOSITES, SPAWN_CHANCE
from .game import SnakeGame
from .modes import MODE_LIST
from .scheduler import ManualScheduler
from .scores import ScoreStore

logger = logging.getLogger(__name__)


def simulate(mode: str, ticks: int, seed: int, user: str = "autopilot",
             scores: Optional[ScoreStore] = None, spawn_chance: float = SPAWN_CHANCE) -> SnakeGame:
    """Play ``ticks`` ticks of ``mode`` on a virtual clock, steered by the autopilot."""
    rng = random.Random(seed)
    clock = ManualScheduler()
    game = SnakeGame(clock, scores=scores if scores is not None else ScoreStore(), rng=rng,
                     spawn_chance=spawn_chance)
    bot_rng = random.Random(seed + 1)
    game.start(mode, user)
    for _ in range(ticks):
        if game.is_game_over:
            break
        direction = choose_direction(game, bot_rng)
        if game.controls_reversed:
            direction = OPPOSITES[direction]
        game.steer(direction)
        clock.advance(game.tick_interval)
    logger.debug("simulation stopped at %.0fms, phase=%s", clock.now(), game.phase.value)
    return game


def main(argv=None):
    settings = load_settings()
    parser = argparse.ArgumentParser(prog="arcade-snake", description="Arcade snake game server and simulator")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the websocket server")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    sim = sub.add_parser("simulate", help="Play a headless game with the autopilot")
    sim.add_argument("--mode", choices=MODE_LIST, default="classic")
    sim.add_argument("--ticks", type=int, default=1000)
    sim.add_argument("--seed", type=int, default=0)
    sim.add_argument("--user", default="autopilot")
    sim.add_argument("--save", action="store_true", help="Record the score in the highscore file")

    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)
    configure_logging(args.log_level.upper())

    if args.command == "serve":
        import uvicorn
        from .main import app
        uvicorn.run(app, host=args.host, port=args.port)
        return 0

    scores = ScoreStore(settings.scores_path if args.save else None)
    game = simulate(args.mode, args.ticks, args.seed, args.user, scores, settings.spawn_chance)
    if not game.is_game_over:
        game.game_over()
    summary = game.summary()
    for key, value in asdict(summary).items():
        if value is not None:
            print(f"{key}: {value}")
    print(f"length: {game.snake.length}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
