"""WebSocket connection management and state serialization."""

import json
import logging
from dataclasses import asdict

from fastapi import WebSocket, WebSocketDisconnect

from .game import SnakeGame
from .models import GameSummary
from .modes import GAME_MODES
from .pickups import PICKUP_CATALOG

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Open game sockets, used to push leaderboard updates to every player."""

    def __init__(self):
        self.sockets: set[WebSocket] = set()

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self.sockets.add(ws)

    def disconnect(self, ws: WebSocket):
        self.sockets.discard(ws)

    async def broadcast(self, message: str):
        for ws in list(self.sockets):
            try:
                await ws.send_text(message)
            except (WebSocketDisconnect, RuntimeError):
                logger.debug("dropping closed socket during broadcast")
                self.sockets.discard(ws)


def modes_payload() -> list[dict]:
    return [
        {
            "key": rules.key,
            "title": rules.title,
            "description": rules.description,
            "rules": list(rules.rules),
            "wraps": rules.wraps,
            "lives": rules.lives,
            "timer": rules.timer.value,
            "timer_seconds": rules.timer_seconds,
        }
        for rules in GAME_MODES.values()
    ]


def pickups_payload() -> list[dict]:
    return [
        {
            "kind": kind.value,
            "name": spec.name,
            "color": spec.color,
            "effect": spec.description,
            "duration_ms": spec.effect_ms,
            "is_malus": spec.is_malus,
        }
        for kind, spec in PICKUP_CATALOG.items()
    ]


def build_state_msg(snapshot: dict) -> str:
    return json.dumps({"type": "state", **snapshot})


def build_game_start_msg(game: SnakeGame) -> str:
    return json.dumps({
        "type": "game_start",
        "mode": game.mode,
        "title": game.rules.title,
        "grid": [game.board.width, game.board.height, game.board.cell],
        "leaderboard": [list(e) for e in game.leaderboard()],
        "state": game.snapshot(),
    })


def build_game_over_msg(summary: GameSummary) -> str:
    return json.dumps({"type": "game_over", "summary": asdict(summary)})


def build_leaderboard_msg(mode: str, entries: list[tuple[str, int]]) -> str:
    rules = GAME_MODES.get(mode)
    return json.dumps({
        "type": "leaderboard",
        "mode": mode,
        "title": rules.title if rules else mode,
        "entries": [list(e) for e in entries],
    })
