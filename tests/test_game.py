"""
Tests for game.py - the tick cycle, mode rules and temporary effects.

Games run on a ManualScheduler with a seeded random source and a spawn
chance of zero unless a test needs pickups, so every tick is reproducible.
"""

import random
from unittest.mock import Mock

import pytest

from arcade_snake.constants import DEFAULT_SPEED, HARDCORE_SPEED, MIN_SPEED
from arcade_snake.effects import EffectSlot
from arcade_snake.game import SnakeGame, speed_for_score
from arcade_snake.models import GamePhase, Pickup, PickupKind
from arcade_snake.modes import GAME_MODES
from arcade_snake.scheduler import ManualScheduler
from arcade_snake.scores import ScoreStore
from arcade_snake.snake import Snake

FAR_AWAY = (0, 0)
LOOP = [(100, 100), (120, 100), (120, 120), (100, 120), (80, 120)]


def make_game(mode="classic", seed=1, spawn_chance=0.0, **kwargs):
    clock = ManualScheduler()
    renders = []
    game = SnakeGame(clock, scores=ScoreStore(), rng=random.Random(seed), spawn_chance=spawn_chance,
                     on_render=renders.append, **kwargs)
    game.start(mode, "ann")
    return clock, game, renders


def feed_next(game):
    game.food.position = game.snake.next_head()


class TestSpeedLaw:
    @pytest.mark.parametrize("score,expected", [
        (0, DEFAULT_SPEED),
        (49, DEFAULT_SPEED),
        (50, 90),
        (120, 80),
        (450, 60),
        (490, MIN_SPEED),
        (500, MIN_SPEED),
        (5000, MIN_SPEED),
    ])
    def test_scaling_modes(self, score, expected):
        assert speed_for_score(score, GAME_MODES["classic"]) == expected

    def test_hardcore_is_fixed(self):
        assert speed_for_score(0, GAME_MODES["hardcore"]) == HARDCORE_SPEED
        assert speed_for_score(1000, GAME_MODES["hardcore"]) == HARDCORE_SPEED


class TestLifecycle:
    def test_new_game_starts_in_menu(self):
        game = SnakeGame(ManualScheduler(), scores=ScoreStore(), rng=random.Random(0))
        assert game.phase is GamePhase.MENU
        game.tick()
        assert game.snake.segments == [(180, 200)]

    def test_start_resets_state(self):
        clock, game, _ = make_game("lives")
        assert game.phase is GamePhase.RUNNING
        assert game.score == 0
        assert game.lives == 3
        assert game.tick_interval == DEFAULT_SPEED
        assert game.snake.segments == [(180, 200)]
        assert game.snake.direction == "right"
        assert game.food.position != (180, 200)

    def test_hardcore_starts_fast(self):
        clock, game, _ = make_game("hardcore")
        assert game.tick_interval == HARDCORE_SPEED

    def test_unknown_mode_falls_back_to_classic(self):
        clock, game, _ = make_game("battle-royale")
        assert game.mode == "classic"
        assert game.phase is GamePhase.RUNNING

    def test_blank_user_becomes_guest(self):
        game = SnakeGame(ManualScheduler(), scores=ScoreStore(), rng=random.Random(0))
        game.start("classic", "   ")
        assert game.user == "Guest"

    def test_driver_ticks_at_interval(self):
        clock, game, renders = make_game()
        game.food.position = FAR_AWAY
        clock.advance(1000)
        assert len(renders) == 10
        assert game.snake.head == (380, 200)

    def test_pause_stops_ticks_and_steering(self):
        clock, game, renders = make_game()
        game.food.position = FAR_AWAY
        game.pause_toggle()
        assert game.is_paused
        clock.advance(1000)
        assert renders == []
        assert game.steer("up") is False

        game.pause_toggle()
        assert game.phase is GamePhase.RUNNING
        clock.advance(100)
        assert len(renders) == 1

    def test_to_menu_cancels_everything(self):
        clock, game, renders = make_game("chrono")
        game.reverse_controls_for(5000)
        game.to_menu()
        assert game.phase is GamePhase.MENU
        assert clock.pending == 0
        clock.advance(10_000)
        assert renders == []

    def test_restart_keeps_mode_and_user(self):
        clock, game, _ = make_game("hardcore")
        game.score = 90
        game.game_over()
        game.restart()
        assert game.mode == "hardcore"
        assert game.user == "ann"
        assert game.score == 0
        assert game.phase is GamePhase.RUNNING


class TestTick:
    def test_classic_move_and_eat(self):
        clock, game, renders = make_game()
        assert game.snake.head == (180, 200)
        game.food.position = (200, 200)

        game.tick()

        assert game.snake.segments == [(200, 200), (180, 200)]
        assert game.score == 10
        assert game.food.position not in {(200, 200), (180, 200)}
        assert "apple" in game.events
        assert len(renders) == 1

    def test_wrap_in_classic(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.snake.reset_to((380, 200), "right")
        game.tick()
        assert game.snake.head == (0, 200)
        assert game.phase is GamePhase.RUNNING

    def test_hardcore_edges_are_lethal(self):
        clock, game, renders = make_game("hardcore")
        game.snake.reset_to((380, 200), "right")
        game.tick()
        assert game.phase is GamePhase.GAME_OVER
        assert len(renders) == 1
        assert renders[0]["phase"] == "game_over"
        assert "game_over" in renders[0]["events"]

    def test_self_collision_ends_classic(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.snake = Snake(LOOP, "down")
        game.tick()
        assert game.phase is GamePhase.GAME_OVER

    def test_direction_lock_released_every_tick(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        assert game.steer("up") is True
        assert game.steer("left") is False
        game.tick()
        assert game.snake.head == (180, 180)
        assert game.steer("left") is True

    def test_lock_released_when_tick_ends_game(self):
        clock, game, _ = make_game("hardcore")
        game.snake.reset_to((380, 200), "right")
        game.steer("down")
        game.snake.direction = "right"
        game.tick()
        assert game.snake.locked is False

    def test_failing_end_and_timer_hooks_are_contained(self):
        clock = ManualScheduler()
        game = SnakeGame(clock, scores=ScoreStore(), rng=random.Random(1), spawn_chance=0.0,
                         on_game_over=Mock(side_effect=RuntimeError("boom")),
                         on_timer=Mock(side_effect=RuntimeError("boom")))
        game.start("chrono", "ann")
        game.food.position = FAR_AWAY
        clock.advance(2000)
        assert game.timer.value == 118
        game.game_over()
        assert game.phase is GamePhase.GAME_OVER
        assert clock.pending == 0

    def test_failing_render_hook_does_not_break_tick(self):
        clock = ManualScheduler()
        game = SnakeGame(clock, scores=ScoreStore(), rng=random.Random(1), spawn_chance=0.0,
                         on_render=Mock(side_effect=RuntimeError("boom")))
        game.start("classic", "ann")
        game.steer("up")
        game.tick()
        assert game.snake.locked is False
        assert game.phase is GamePhase.RUNNING

    def test_highscore_saved_on_eat(self):
        clock, game, _ = make_game()
        feed_next(game)
        game.tick()
        assert game.scores.get_highscore("classic", "ann") == 10
        assert "highscore" in game.events

    def test_eating_speeds_up_without_losing_rhythm(self):
        clock, game, renders = make_game()
        game.score = 40
        feed_next(game)
        game.tick()
        assert game.tick_interval == 90
        game.food.position = FAR_AWAY
        clock.advance(89)
        assert len(renders) == 1
        clock.advance(1)
        assert len(renders) == 2

    def test_hardcore_speed_does_not_scale(self):
        clock, game, _ = make_game("hardcore")
        game.score = 490
        feed_next(game)
        game.tick()
        assert game.score == 500
        assert game.tick_interval == HARDCORE_SPEED

    def test_pickups_spawn_during_maintenance(self):
        clock, game, _ = make_game(spawn_chance=1.0)
        game.food.position = FAR_AWAY
        game.tick()
        collected = any(e.startswith("pickup:") for e in game.events)
        assert len(game.bonus.items) + collected == 1
        for pickup in game.bonus.items:
            assert pickup.position != game.food.position
            assert pickup.position != (180, 200)

    def test_pickup_collision(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.bonus.items.append(Pickup(PickupKind.GOLD, game.snake.next_head(), expires_at=10_000))
        game.tick()
        assert game.score == 50
        assert game.bonus.items == []
        assert "pickup:gold" in game.events

    def test_food_respawn_avoids_pickups(self):
        clock, game, _ = make_game()
        blocked = game.food.position
        game.bonus.items = [Pickup(PickupKind.GOLD, blocked, expires_at=10_000)]
        for _ in range(20):
            game._respawn_food()
            assert game.food.position != blocked
            assert game.food.position not in game.snake.segments


class TestLivesMode:
    def test_last_life_ends_game(self):
        clock, game, _ = make_game("lives")
        game.lives = 1
        game.food.position = FAR_AWAY
        game.snake = Snake(LOOP, "down")
        game.tick()
        assert game.lives == 0
        assert game.phase is GamePhase.GAME_OVER

    def test_soft_respawn(self):
        clock, game, _ = make_game("lives")
        game.lives = 2
        game.score = 40
        game.food.position = FAR_AWAY
        pickup = Pickup(PickupKind.GOLD, (380, 0), expires_at=10_000)
        game.bonus.items.append(pickup)
        game.reverse_controls_for(5000)
        game.snake = Snake(LOOP, "down")

        game.tick()

        assert game.phase is GamePhase.RUNNING
        assert game.lives == 1
        assert game.snake.segments == [(180, 200)]
        assert game.snake.direction == "right"
        assert game.score == 40
        assert game.bonus.items == [pickup]
        assert game.controls_reversed is False
        assert not game.effects.is_active(EffectSlot.CONTROL_POLARITY)
        assert game.food.position != (180, 200)
        assert "life_lost" in game.events


class TestTimedModes:
    def test_chrono_reports_elapsed_time(self):
        clock, game, _ = make_game("chrono")
        game.food.position = FAR_AWAY
        assert game.timer.value == 120
        clock.advance(3000)
        game.game_over()
        assert game.summary().elapsed_seconds == 3
        assert game.summary().remaining_seconds is None

    def test_chrono_timeout_ends_game(self):
        summaries = []
        clock, game, _ = make_game("chrono", on_game_over=summaries.append)
        game.food.position = FAR_AWAY
        clock.advance(120_000)
        assert game.phase is GamePhase.GAME_OVER
        assert len(summaries) == 1
        assert summaries[0].elapsed_seconds == 120

    def test_reverse_timer_food_adds_time(self):
        clock, game, _ = make_game("reverse-timer")
        assert game.timer.value == 60
        feed_next(game)
        game.tick()
        assert game.timer.value == 65

    def test_reverse_timer_ends_once(self):
        summaries = []
        clock, game, _ = make_game("reverse-timer", on_game_over=summaries.append)
        game.food.position = FAR_AWAY
        clock.advance(60_000)
        assert game.phase is GamePhase.GAME_OVER
        clock.advance(60_000)
        assert len(summaries) == 1
        assert summaries[0].remaining_seconds == 0
        assert game.timer.value == 0

    def test_timer_hook_reports_changes(self):
        seen = []
        clock, game, _ = make_game("reverse-timer", on_timer=seen.append)
        game.food.position = FAR_AWAY
        clock.advance(2000)
        assert seen == [60, 59, 58]


class TestEffects:
    def test_score_is_clamped(self):
        clock, game, _ = make_game()
        game.score = 10
        game.add_score(-30)
        assert game.score == 0

    def test_apple_multiplier_window(self):
        clock, game, _ = make_game()
        game.set_apple_multiplier_for(2, 5000)
        feed_next(game)
        game.tick()
        assert game.score == 20
        game.food.position = FAR_AWAY
        clock.advance(5000)
        assert game.apple_multiplier == 1

    def test_slow_restores_to_speed_law_at_restore_time(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.slow_for(4000)
        assert game.tick_interval == 200
        game.score = 100
        clock.advance(4000)
        assert game.tick_interval == 80

    def test_slow_never_speeds_up(self):
        clock, game, _ = make_game()
        game.tick_interval = 300
        game.slow_for(4000)
        assert game.tick_interval == 300

    def test_hardcore_slow_restores_fixed_speed(self):
        clock, game, _ = make_game("hardcore")
        game.snake.reset_to((0, 200), "right")
        game.food.position = FAR_AWAY
        game.slow_for(1000)
        assert game.tick_interval == 200
        clock.advance(1000)
        assert game.tick_interval == HARDCORE_SPEED

    def test_reversed_controls_invert_steering(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.reverse_controls_for(5000)
        assert game.steer("up") is True
        assert game.snake.direction == "down"
        game.tick()
        clock.advance(5000)
        assert game.controls_reversed is False

    def test_reapplying_effect_restores_once(self):
        clock, game, _ = make_game()
        game.food.position = FAR_AWAY
        game.reverse_controls_for(5000)
        clock.advance(3000)
        game.reverse_controls_for(5000)
        clock.advance(2500)
        assert game.controls_reversed is True
        clock.advance(2500)
        assert game.controls_reversed is False

    def test_shrink_via_poison(self):
        clock, game, _ = make_game()
        game.snake = Snake([(180, 200), (160, 200), (140, 200), (120, 200)], "right")
        game.score = 80
        game.food.position = FAR_AWAY
        game.bonus.items.append(Pickup(PickupKind.POISON, (200, 200), expires_at=10_000))
        game.tick()
        assert game.score == 30
        assert game.snake.length == 2


class TestGameOver:
    def test_idempotent_and_clears_pending_work(self):
        summaries = []
        clock, game, _ = make_game("chrono", on_game_over=summaries.append)
        game.set_apple_multiplier_for(2, 5000)
        game.score = 30
        game.game_over()
        game.game_over()
        assert len(summaries) == 1
        assert clock.pending == 0
        assert game.scores.get_highscore("chrono", "ann") == 30
        assert game.summary().score == 30
        assert game.summary().mode_title == GAME_MODES["chrono"].title

    def test_ticks_are_ignored_after_game_over(self):
        clock, game, renders = make_game()
        game.game_over()
        game.tick()
        assert renders == []

    def test_snapshot_shape(self):
        clock, game, _ = make_game("lives")
        snap = game.snapshot()
        assert snap["phase"] == "running"
        assert snap["segments"] == [[180, 200]]
        assert snap["direction"] == "right"
        assert snap["hud"]["lives"] == 3
        assert snap["hud"]["timer"] is None
        assert snap["hud"]["speed_ms"] == DEFAULT_SPEED
        assert snap["pickups"] == []
