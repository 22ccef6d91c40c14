"""Input mapping boundary between raw key events and the control tracker.

Keys outside the map, and symbol names outside an axis vocabulary, are
rejected here and never reach the tracker.
"""

import logging
from typing import Optional, Union

from promptsync.realtime.control_state import (
    AXIS_SYMBOLS,
    Axis,
    AxisSymbol,
    ControlStateTracker,
    MovementKey,
    ViewKey,
)

logger = logging.getLogger(__name__)

# WASD moves the player, IJKL moves the camera
KEYBOARD_MAP: dict[str, tuple[Axis, AxisSymbol]] = {
    "w": (Axis.MOVEMENT, MovementKey.FORWARD),
    "a": (Axis.MOVEMENT, MovementKey.LEFT),
    "s": (Axis.MOVEMENT, MovementKey.BACK),
    "d": (Axis.MOVEMENT, MovementKey.RIGHT),
    "i": (Axis.VIEW, ViewKey.UP),
    "j": (Axis.VIEW, ViewKey.LEFT),
    "k": (Axis.VIEW, ViewKey.DOWN),
    "l": (Axis.VIEW, ViewKey.RIGHT),
}


def map_key(key: str) -> Optional[tuple[Axis, AxisSymbol]]:
    """Axis and symbol for a physical key, or None if the key is unmapped."""
    if not isinstance(key, str):
        return None
    return KEYBOARD_MAP.get(key.lower())


def parse_axis(value: Union[str, Axis]) -> Optional[Axis]:
    if isinstance(value, Axis):
        return value
    try:
        return Axis(str(value).strip().lower())
    except ValueError:
        return None


def parse_symbol(axis: Axis, value: Union[str, AxisSymbol]) -> Optional[AxisSymbol]:
    """Resolve a symbol name (``"forward"``) or wire letter (``"W"``) on ``axis``.

    Neutral is not a pressable intent and resolves to None, as does anything
    outside the axis vocabulary.
    """
    symbols = AXIS_SYMBOLS[axis]
    if isinstance(value, symbols):
        symbol = value
    elif isinstance(value, str):
        text = value.strip()
        symbol = symbols.__members__.get(text.upper())
        if symbol is None and len(text) == 1:
            try:
                symbol = symbols(text.upper())
            except ValueError:
                symbol = None
    else:
        symbol = None

    if symbol is None or symbol.name == "NEUTRAL":
        return None
    return symbol


class KeyInput:
    """Feeds key down/up events into a ControlStateTracker."""

    def __init__(self, tracker: ControlStateTracker):
        self.tracker = tracker

    def key_down(self, key: str) -> bool:
        """Handle a key press. Returns True if a control message was emitted."""
        mapped = map_key(key)
        if mapped is None:
            logger.debug(f"Ignoring unmapped key: {key!r}")
            return False
        axis, symbol = mapped
        return self.tracker.press(axis, symbol)

    def key_up(self, key: str) -> bool:
        """Handle a key release. Returns True if a control message was emitted."""
        mapped = map_key(key)
        if mapped is None:
            logger.debug(f"Ignoring unmapped key: {key!r}")
            return False
        axis, symbol = mapped
        return self.tracker.release(axis, symbol)
