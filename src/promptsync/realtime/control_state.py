"""Directional control state for the session.

Two independent axes are tracked:
- Movement axis (keyboard WASD, neutral Q)
- View axis (camera IJKL, neutral U)

Each axis holds exactly one symbol. ``press`` sets the symbol (last press
wins), ``release`` always returns the axis to neutral. The merged state is
edge-triggered: a control message carrying both axes is emitted only when
the merged state actually changes, so key auto-repeat and duplicate pointer
events never produce duplicate messages.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Union

from promptsync.realtime.messages import control_message

logger = logging.getLogger(__name__)


class Axis(Enum):
    """Independent categories of directional input."""

    MOVEMENT = "movement"
    VIEW = "view"


class MovementKey(Enum):
    """Movement axis symbols, valued by their wire letter."""

    NEUTRAL = "Q"
    FORWARD = "W"
    LEFT = "A"
    BACK = "S"
    RIGHT = "D"


class ViewKey(Enum):
    """View axis symbols, valued by their wire letter."""

    NEUTRAL = "U"
    UP = "I"
    LEFT = "J"
    DOWN = "K"
    RIGHT = "L"


AxisSymbol = Union[MovementKey, ViewKey]

AXIS_SYMBOLS: dict[Axis, type[Enum]] = {
    Axis.MOVEMENT: MovementKey,
    Axis.VIEW: ViewKey,
}


@dataclass(frozen=True)
class ControlState:
    """Snapshot of both axes. Neutral/Neutral is the rest state."""

    movement: MovementKey = MovementKey.NEUTRAL
    view: ViewKey = ViewKey.NEUTRAL

    @property
    def is_neutral(self) -> bool:
        return self.movement is MovementKey.NEUTRAL and self.view is ViewKey.NEUTRAL

    def with_symbol(self, axis: Axis, symbol: AxisSymbol) -> "ControlState":
        if axis is Axis.MOVEMENT:
            return replace(self, movement=symbol)
        return replace(self, view=symbol)

    def neutral_on(self, axis: Axis) -> "ControlState":
        if axis is Axis.MOVEMENT:
            return replace(self, movement=MovementKey.NEUTRAL)
        return replace(self, view=ViewKey.NEUTRAL)

    def to_wire(self) -> dict:
        """Complete control message for this snapshot."""
        return control_message(
            mouse_key=self.view.value, keyboard_key=self.movement.value
        ).to_wire()


class ControlStateTracker:
    """Merges the movement and view axes and emits on change only.

    Args:
        send: Callable receiving outbound message dicts. Its return value
            and any failure are not inspected here; the dispatcher owns
            failure handling.
    """

    def __init__(self, send: Optional[Callable[[dict], object]] = None):
        self._send = send if send is not None else (lambda _: None)
        self._state = ControlState()

    @property
    def state(self) -> ControlState:
        return self._state

    def press(self, axis: Axis, symbol: AxisSymbol) -> bool:
        """Set ``axis`` to ``symbol``. Returns True if a message was emitted."""
        self._check_symbol(axis, symbol)
        return self._transition(self._state.with_symbol(axis, symbol))

    def release(self, axis: Axis, symbol: Optional[AxisSymbol] = None) -> bool:
        """Return ``axis`` to neutral, whatever symbol is currently held.

        ``symbol`` is accepted for symmetry with ``press`` and is not
        required to match the active symbol.
        """
        if symbol is not None:
            self._check_symbol(axis, symbol)
        return self._transition(self._state.neutral_on(axis))

    def reset(self):
        """Return both axes to neutral without emitting."""
        if not self._state.is_neutral:
            logger.debug(f"Control state cleared from {self._state}")
        self._state = ControlState()

    def _transition(self, new_state: ControlState) -> bool:
        if new_state == self._state:
            return False
        self._state = new_state
        logger.debug(
            f"Control state changed: movement={new_state.movement.name} "
            f"view={new_state.view.name}"
        )
        self._send(new_state.to_wire())
        return True

    @staticmethod
    def _check_symbol(axis: Axis, symbol: AxisSymbol):
        # Out-of-vocabulary symbols are filtered at the input mapping layer
        if not isinstance(symbol, AXIS_SYMBOLS[axis]):
            raise TypeError(f"{symbol!r} is not a {axis.value} axis symbol")
