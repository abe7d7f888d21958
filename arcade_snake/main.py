"""FastAPI application: menu data routes and the per-connection game socket."""

import asyncio
import json
import logging

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .config import configure_logging, load_settings
from .connection_manager import (
    ConnectionManager, build_game_over_msg, build_game_start_msg, build_leaderboard_msg,
    build_state_msg, modes_payload, pickups_payload,
)
from .constants import LEADERBOARD_SIZE
from .controls import direction_for_key
from .game import SnakeGame
from .models import GamePhase
from .modes import GAME_MODES
from .scheduler import LoopScheduler
from .scores import ScoreStore

logger = logging.getLogger(__name__)

settings = load_settings()
scores = ScoreStore(settings.scores_path)
app = FastAPI()
manager = ConnectionManager()
background_tasks: set[asyncio.Task] = set()


@app.get("/api/modes")
async def list_modes():
    return modes_payload()


@app.get("/api/pickups")
async def list_pickups():
    return pickups_payload()


@app.get("/api/leaderboard/{mode}")
async def leaderboard(mode: str, n: int = LEADERBOARD_SIZE):
    return {"mode": mode, "entries": [list(e) for e in scores.top_n(mode, n)]}


@app.get("/api/highscore/{mode}/{user}")
async def highscore(mode: str, user: str):
    return {"mode": mode, "user": user, "highscore": scores.get_highscore(mode, user)}


def schedule_broadcast(message: str) -> asyncio.Task:
    task = asyncio.get_running_loop().create_task(manager.broadcast(message))
    background_tasks.add(task)
    task.add_done_callback(background_tasks.discard)
    return task


async def pump(ws: WebSocket, outbox: asyncio.Queue):
    while True:
        msg = await outbox.get()
        try:
            await ws.send_text(msg)
        except (WebSocketDisconnect, RuntimeError):
            return


def handle_message(game: SnakeGame, msg: dict, outbox: asyncio.Queue):
    kind = msg.get("type")
    if kind == "start":
        mode = msg.get("mode", "classic")
        name = msg.get("name", "")
        game.start(mode if isinstance(mode, str) else "classic", name[:16] if isinstance(name, str) else "")
        outbox.put_nowait(build_game_start_msg(game))
    elif kind == "input":
        direction = msg.get("direction")
        if direction is None:
            direction = direction_for_key(msg.get("key"))
        game.steer(direction)
    elif kind == "pause":
        game.pause_toggle()
        outbox.put_nowait(json.dumps({"type": "pause_state", "paused": game.is_paused}))
    elif kind == "restart":
        if game.phase is not GamePhase.MENU:
            game.restart()
            outbox.put_nowait(build_game_start_msg(game))
    elif kind == "menu":
        game.to_menu()
        outbox.put_nowait(json.dumps({"type": "menu"}))
    elif kind == "leaderboard":
        mode = msg.get("mode", game.mode)
        if isinstance(mode, str) and mode in GAME_MODES:
            outbox.put_nowait(build_leaderboard_msg(mode, scores.top_n(mode)))


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    player_id = f"p{id(ws)}"
    await manager.connect(ws)
    outbox: asyncio.Queue = asyncio.Queue()

    def on_render(snapshot: dict):
        outbox.put_nowait(build_state_msg(snapshot))
        if "highscore" in snapshot["events"]:
            mode = snapshot["mode"]
            schedule_broadcast(build_leaderboard_msg(mode, scores.top_n(mode)))

    game = SnakeGame(
        LoopScheduler(),
        scores=scores,
        on_render=on_render,
        on_game_over=lambda summary: outbox.put_nowait(build_game_over_msg(summary)),
        on_timer=lambda seconds: outbox.put_nowait(json.dumps({"type": "timer", "value": seconds})),
        spawn_chance=settings.spawn_chance,
    )
    outbox.put_nowait(json.dumps({"type": "welcome", "player_id": player_id}))
    sender = asyncio.create_task(pump(ws, outbox))
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                logger.debug("ignoring malformed message from %s", player_id)
                continue
            if isinstance(msg, dict):
                handle_message(game, msg, outbox)
    except WebSocketDisconnect:
        pass
    finally:
        game.to_menu()
        sender.cancel()
        manager.disconnect(ws)


if __name__ == "__main__":
    import uvicorn
    configure_logging(settings.log_level)
    logger.info("Snake server starting on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
