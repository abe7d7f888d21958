"""Core game state and tick cycle."""

import logging
import math
import random
from typing import Callable, Optional

from .constants import (
    APPLE_BASE_POINTS, DEFAULT_SPEED, DEFAULT_USER, LEADERBOARD_SIZE, MIN_SPEED,
    NEAR_FOOD_RADIUS, OPPOSITES, SCORE_PER_SPEED_STEP, SLOW_FLOOR_MS, SPAWN_CHANCE,
    SPEED_STEP, START_COL, START_DIRECTION, START_ROW,
)
from .effects import EffectScheduler, EffectSlot
from .food import Food
from .grid import Board, Cell
from .models import GamePhase, GameSummary
from .modes import GAME_MODES, ModeRules, get_mode
from .pickups import BonusSpawner
from .scores import ScoreStore
from .snake import Snake
from .timekeeper import TimeKeeper, TimerMode

logger = logging.getLogger(__name__)


def speed_for_score(score: int, rules: ModeRules) -> int:
    """Tick interval in ms: fixed for fixed-speed modes, faster every 50 points otherwise."""
    if rules.fixed_interval is not None:
        return rules.fixed_interval
    return max(MIN_SPEED, DEFAULT_SPEED - (score // SCORE_PER_SPEED_STEP) * SPEED_STEP)


class SnakeGame:
    """
    Owns one game and runs its tick cycle.

    Every mutation goes through the public methods below; the tick driver,
    the countdown driver and the effect restores all call back into this
    object on the same scheduler, so nothing ever runs in between the steps
    of a tick.

    Hooks:
        on_render(snapshot): once per tick, after the tick's state changes
        on_game_over(summary): when the game ends, by collision or timeout
        on_timer(seconds): whenever the countdown value changes
    """

    def __init__(self, scheduler, scores: Optional[ScoreStore] = None, board: Optional[Board] = None,
                 rng: Optional[random.Random] = None,
                 on_render: Optional[Callable[[dict], None]] = None,
                 on_game_over: Optional[Callable[[GameSummary], None]] = None,
                 on_timer: Optional[Callable[[int], None]] = None,
                 spawn_chance: float = SPAWN_CHANCE, near_radius: int = NEAR_FOOD_RADIUS):
        self.scheduler = scheduler
        self.scores = scores if scores is not None else ScoreStore()
        self.board = board or Board()
        self.rng = rng or random.Random()
        self.on_render = on_render
        self.on_game_over = on_game_over
        self.on_timer = on_timer
        self.spawn_chance = spawn_chance
        self.near_radius = near_radius

        self.rules: ModeRules = GAME_MODES["classic"]
        self.mode = self.rules.key
        self.user = DEFAULT_USER
        self.phase = GamePhase.MENU
        self.score = 0
        self.lives = self.rules.lives
        self.apple_multiplier = 1
        self.tick_interval = speed_for_score(0, self.rules)
        self.controls_reversed = False
        self.events: list[str] = []

        self.snake = Snake([self.start_cell], START_DIRECTION, self.board.cell)
        self.food = Food(self.board, self.rng)
        self.bonus = BonusSpawner(self.board, self.rng)
        self.timer = TimeKeeper(scheduler)
        self.effects = EffectScheduler(scheduler)
        self.effects.register(EffectSlot.APPLE_MULTIPLIER, self._set_apple_multiplier, lambda: 1)
        self.effects.register(EffectSlot.TICK_INTERVAL, self._set_tick_interval,
                              lambda: speed_for_score(self.score, self.rules))
        self.effects.register(EffectSlot.CONTROL_POLARITY, self._set_controls_reversed, lambda: False)

        self._driver = None
        self._in_tick = False
        self._cadence_dirty = False
        self._summary: Optional[GameSummary] = None

        self._respawn_food()

    @property
    def start_cell(self) -> Cell:
        return START_COL * self.board.cell, START_ROW * self.board.cell

    @property
    def is_paused(self) -> bool:
        return self.phase is GamePhase.PAUSED

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    # ── Lifecycle ──────────────────────────────────────────────────

    def start(self, mode: str, user: Optional[str] = None):
        self.rules = get_mode(mode)
        self.mode = self.rules.key
        self.user = (user or "").strip() or DEFAULT_USER
        self._reset_core_state()

        if self.rules.uses_timer:
            starter = self.timer.start_countdown if self.rules.timer is TimerMode.COUNTDOWN else self.timer.start_reverse
            starter(self.rules.timer_seconds, on_tick=self._timer_changed, on_end=self.game_over)

        self.phase = GamePhase.RUNNING
        self._restart_driver()
        logger.info("game started: mode=%s user=%s", self.mode, self.user)

    def restart(self):
        self.start(self.mode, self.user)

    def to_menu(self):
        self.phase = GamePhase.MENU
        self._stop_driver()
        self.timer.stop()
        self.effects.clear()

    def pause_toggle(self):
        self.set_paused(self.phase is GamePhase.RUNNING)

    def set_paused(self, paused: bool):
        if paused and self.phase is GamePhase.RUNNING:
            self.phase = GamePhase.PAUSED
            self.timer.set_paused(True)
            self._stop_driver()
        elif not paused and self.phase is GamePhase.PAUSED:
            self.phase = GamePhase.RUNNING
            self.timer.set_paused(False)
            self._restart_driver()

    def steer(self, direction) -> bool:
        """Directional command from the player, subject to inversion and the per-tick lock."""
        if self.phase is not GamePhase.RUNNING or not isinstance(direction, str):
            return False
        direction = direction.lower()
        if self.controls_reversed:
            direction = OPPOSITES.get(direction, direction)
        return self.snake.set_direction(direction)

    def game_over(self):
        if self.phase in (GamePhase.GAME_OVER, GamePhase.MENU):
            return
        self.phase = GamePhase.GAME_OVER
        self._stop_driver()

        remaining = self.timer.value
        self.timer.stop()
        self.effects.clear()
        self.scores.save_if_highscore(self.mode, self.user, self.score)
        self.events.append("game_over")

        summary = GameSummary(score=self.score, mode=self.mode, mode_title=self.rules.title, user=self.user)
        if self.rules.timer is TimerMode.COUNTDOWN:
            summary.elapsed_seconds = self.rules.timer_seconds - remaining
        elif self.rules.timer is TimerMode.REVERSE:
            summary.remaining_seconds = remaining
        self._summary = summary
        logger.info("game over: mode=%s user=%s score=%d", self.mode, self.user, self.score)

        self._call_hook(self.on_game_over, summary)

    def summary(self) -> Optional[GameSummary]:
        return self._summary

    # ── Tick ───────────────────────────────────────────────────────

    def tick(self):
        if self.phase is not GamePhase.RUNNING:
            return
        self._in_tick = True
        self.events = []
        try:
            self._step()
            self._render()
        finally:
            self.snake.unlock()
            self._in_tick = False
            if self._cadence_dirty:
                self._cadence_dirty = False
                if self.phase is GamePhase.RUNNING:
                    self._restart_driver()

    def _step(self):
        self.bonus.tick(
            self.scheduler.now(),
            self.rules.pickup_weights,
            food_pos=self.food.position,
            occupied=[*self.snake.segments, self.food.position],
            spawn_chance=self.spawn_chance,
            near_radius=self.near_radius,
        )

        self.snake.advance(False)

        if self.rules.wraps:
            self.snake.apply_wrap(self.board.width, self.board.height)
        elif self.snake.is_out_of_bounds(self.board.width, self.board.height):
            self.game_over()
            return

        if self.snake.hit_self():
            if self.rules.lives <= 1:
                self.game_over()
                return
            self.lives -= 1
            self.events.append("life_lost")
            if self.lives <= 0:
                self.game_over()
                return
            self._soft_respawn()

        if self.food.is_eaten_by(self.snake.head):
            self._eat()

        head = self.snake.head
        kind = next((it.kind for it in self.bonus.items if it.position == head), None)
        if self.bonus.apply_if_collision(head, self):
            self.events.append(f"pickup:{kind.value}")

    def _eat(self):
        self.events.append("apple")
        self.add_score(APPLE_BASE_POINTS * self.apple_multiplier)
        self.snake.grow()
        if self.rules.food_time_bonus:
            self.timer.add(self.rules.food_time_bonus)
        if self.scores.save_if_highscore(self.mode, self.user, self.score):
            self.events.append("highscore")
        self._update_speed()
        self._respawn_food()

    def _soft_respawn(self):
        self.snake.reset_to(self.start_cell, START_DIRECTION)
        self.effects.cancel(EffectSlot.CONTROL_POLARITY)
        self.controls_reversed = False
        self._respawn_food()

    def _render(self):
        if self.on_render is not None:
            self._call_hook(self.on_render, self.snapshot())

    def _call_hook(self, hook, arg):
        if hook is None:
            return
        try:
            hook(arg)
        except Exception:
            logger.exception("game hook failed")

    # ── Pickup effects ─────────────────────────────────────────────

    def add_score(self, delta):
        self.score = max(0, self.score + math.floor(delta))

    def shrink(self, n: int):
        self.snake.shrink(n)

    def set_apple_multiplier_for(self, multiplier: int, ms: int):
        self.effects.apply(EffectSlot.APPLE_MULTIPLIER, multiplier, ms)

    def slow_for(self, ms: int):
        self.effects.apply(EffectSlot.TICK_INTERVAL, max(self.tick_interval, SLOW_FLOOR_MS), ms)

    def reverse_controls_for(self, ms: int):
        self.effects.apply(EffectSlot.CONTROL_POLARITY, True, ms)

    # ── State views ────────────────────────────────────────────────

    def hud(self) -> dict:
        return {
            "mode_title": self.rules.title,
            "user": self.user,
            "score": self.score,
            "highscore": self.scores.get_highscore(self.mode, self.user),
            "lives": self.lives if self.rules.lives > 1 else None,
            "timer": self.timer.value if self.rules.uses_timer else None,
            "speed_ms": self.tick_interval,
            "length": self.snake.length,
            "apples": self.score // APPLE_BASE_POINTS,
            "multiplier": self.apple_multiplier,
            "reversed": self.controls_reversed,
        }

    def snapshot(self) -> dict:
        return {
            "phase": self.phase.value,
            "mode": self.mode,
            "segments": [list(s) for s in self.snake.segments],
            "direction": self.snake.direction,
            "food": list(self.food.position),
            "pickups": [
                {"kind": it.kind.value, "x": it.position[0], "y": it.position[1]}
                for it in self.bonus.items
            ],
            "hud": self.hud(),
            "events": list(self.events),
        }

    def leaderboard(self, n: int = LEADERBOARD_SIZE) -> list[tuple[str, int]]:
        return self.scores.top_n(self.mode, n)

    # ── Internals ──────────────────────────────────────────────────

    def _reset_core_state(self):
        self._stop_driver()
        self.timer.stop()
        self.effects.clear()
        self.score = 0
        self.apple_multiplier = 1
        self.controls_reversed = False
        self.tick_interval = speed_for_score(0, self.rules)
        self._cadence_dirty = False
        self.lives = self.rules.lives
        self.events = []
        self._summary = None
        self.snake.reset_to(self.start_cell, START_DIRECTION)
        self.bonus.clear()
        self._respawn_food()

    def _respawn_food(self):
        self.food.respawn([*self.snake.segments, *self.bonus.positions])

    def _update_speed(self):
        if self.rules.fixed_interval is not None:
            return
        self._set_tick_interval(speed_for_score(self.score, self.rules))

    def _set_tick_interval(self, ms: int):
        if ms == self.tick_interval:
            return
        self.tick_interval = ms
        if self._in_tick:
            self._cadence_dirty = True
        elif self.phase is GamePhase.RUNNING:
            self._restart_driver()

    def _set_apple_multiplier(self, value: int):
        self.apple_multiplier = value

    def _set_controls_reversed(self, value: bool):
        self.controls_reversed = bool(value)

    def _timer_changed(self, seconds: int):
        self._call_hook(self.on_timer, seconds)

    def _restart_driver(self):
        self._stop_driver()
        self._driver = self.scheduler.call_every(self.tick_interval, self.tick)
        logger.debug("tick driver at %dms", self.tick_interval)

    def _stop_driver(self):
        if self._driver is not None:
            self._driver.cancel()
            self._driver = None
