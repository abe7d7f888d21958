"""Deployment settings read from the environment (and a local .env file)."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .constants import SPAWN_CHANCE

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8765
DEFAULT_SCORES_PATH = "highscores.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring invalid %s=%r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring invalid %s=%r", name, raw)
        return default


@dataclass
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    scores_path: Optional[str] = DEFAULT_SCORES_PATH
    log_level: str = "INFO"
    spawn_chance: float = SPAWN_CHANCE


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        host=os.getenv("SNAKE_HOST", DEFAULT_HOST),
        port=_env_int("SNAKE_PORT", DEFAULT_PORT),
        scores_path=os.getenv("SNAKE_SCORES_PATH", DEFAULT_SCORES_PATH) or None,
        log_level=os.getenv("SNAKE_LOG_LEVEL", "INFO").upper(),
        spawn_chance=_env_float("SNAKE_SPAWN_CHANCE", SPAWN_CHANCE),
    )


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
