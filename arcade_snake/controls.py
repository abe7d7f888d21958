"""Keyboard key names to headings."""

from typing import Optional

from .constants import DIRECTIONS

KEYMAP = {
    "ArrowUp": "up",
    "ArrowDown": "down",
    "ArrowLeft": "left",
    "ArrowRight": "right",
    # AZERTY
    "z": "up", "Z": "up",
    "q": "left", "Q": "left",
    # QWERTY
    "w": "up", "W": "up",
    "a": "left", "A": "left",
    # shared
    "s": "down", "S": "down",
    "d": "right", "D": "right",
}


def direction_for_key(key) -> Optional[str]:
    if not isinstance(key, str):
        return None
    if key in KEYMAP:
        return KEYMAP[key]
    lowered = key.lower()
    return lowered if lowered in DIRECTIONS else None
