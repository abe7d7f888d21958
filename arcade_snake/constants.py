"""Game constants."""

# Board geometry (pixels)
CELL = 20
BOARD_W, BOARD_H = 400, 400
START_COL, START_ROW = 9, 10
START_DIRECTION = "right"

# Tick interval (ms per tick)
DEFAULT_SPEED = 100
HARDCORE_SPEED = 70
MIN_SPEED = 50
SPEED_STEP = 10
SCORE_PER_SPEED_STEP = 50
SLOW_FLOOR_MS = 200

APPLE_BASE_POINTS = 10
START_LIVES = 3

CHRONO_DURATION = 120
REVERSE_TIMER_DURATION = 60
REVERSE_TIMER_BONUS = 5
TIMER_TICK_MS = 1000

SPAWN_CHANCE = 0.3
NEAR_FOOD_RADIUS = 3
MIN_SAMPLE_ATTEMPTS = 200

DIRECTIONS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}
OPPOSITES = {"up": "down", "down": "up", "left": "right", "right": "left"}

DEFAULT_USER = "Guest"
LEADERBOARD_SIZE = 5
