"""
High scores per mode and per user.

Stored as ``{mode: {user: score}}`` in a JSON file. A missing or unreadable
file loads as an empty table and write failures are logged, never raised.
"""

import json
import logging
import math
from pathlib import Path
from typing import Optional, Union

from .constants import LEADERBOARD_SIZE

logger = logging.getLogger(__name__)


def _as_score(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(math.floor(value))


class ScoreStore:
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._map: dict[str, dict[str, int]] = self._load()

    def get_highscore(self, mode: str, user: str) -> int:
        if not mode or not user:
            return 0
        return self._map.get(mode, {}).get(user, 0)

    def save_if_highscore(self, mode: str, user: str, score) -> bool:
        """Store ``score`` if it beats the user's best for ``mode``."""
        value = _as_score(score)
        if not mode or not user or value is None:
            return False
        table = self._map.setdefault(mode, {})
        if value > table.get(user, 0):
            table[user] = value
            self._save()
            logger.info("new highscore %s/%s: %d", mode, user, value)
            return True
        return False

    def top_n(self, mode: str, n: int = LEADERBOARD_SIZE) -> list[tuple[str, int]]:
        entries = self._map.get(mode, {}).items()
        return sorted(entries, key=lambda e: e[1], reverse=True)[:max(0, n)]

    def merge(self, data) -> None:
        """Merge an external ``{mode: {user: score}}`` snapshot, keeping the best of each."""
        if not isinstance(data, dict):
            return
        for mode, users in data.items():
            if not isinstance(users, dict):
                continue
            table = self._map.setdefault(mode, {})
            for user, score in users.items():
                value = _as_score(score)
                if value is None:
                    continue
                if value > table.get(user, 0):
                    table[user] = value
        self._save()

    def clear_mode(self, mode: str):
        if not mode:
            return
        self._map[mode] = {}
        self._save()

    def clear_all(self):
        self._map = {}
        self._save()

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {mode: dict(users) for mode, users in self._map.items()}

    def _load(self) -> dict[str, dict[str, int]]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("could not read scores from %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            return {}
        loaded: dict[str, dict[str, int]] = {}
        for mode, users in raw.items():
            if isinstance(users, dict):
                loaded[mode] = {u: s for u, s in ((u, _as_score(s)) for u, s in users.items()) if s is not None}
        return loaded

    def _save(self):
        if self.path is None:
            return
        try:
            self.path.write_text(json.dumps(self._map), encoding="utf-8")
        except OSError as e:
            logger.warning("could not write scores to %s: %s", self.path, e)
