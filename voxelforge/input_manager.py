"""Per-frame keyboard and mouse state tracking."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Hashable


class PressState(Enum):
    """Lifecycle of a key or button across frames."""

    NONE = "none"
    PRESSED = "pressed"
    HELD = "held"
    RELEASED = "released"


def _advance(current: dict, previous: dict) -> None:
    for key, state in current.items():
        if state is PressState.PRESSED and previous.get(key) is PressState.PRESSED:
            current[key] = PressState.HELD
    for key, state in current.items():
        if state is PressState.RELEASED and previous.get(key) is PressState.RELEASED:
            current[key] = PressState.NONE
    previous.update(current)


class InputManager:
    """Holds key, mouse-button and mouse-position state between frames."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: dict[Hashable, PressState] = {}
        self._previous_keys: dict[Hashable, PressState] = {}
        self._buttons: dict[Hashable, PressState] = {}
        self._previous_buttons: dict[Hashable, PressState] = {}
        self._mouse_pos = (0.0, 0.0)
        self._previous_mouse_pos = (0.0, 0.0)
        self._mouse_delta = (0.0, 0.0)

    def update(self) -> None:
        """Advance one frame: pressed becomes held, released becomes none."""
        with self._lock:
            _advance(self._keys, self._previous_keys)
            _advance(self._buttons, self._previous_buttons)
            x, y = self._mouse_pos
            px, py = self._previous_mouse_pos
            self._mouse_delta = (x - px, y - py)
            self._previous_mouse_pos = self._mouse_pos

    def _state(self, table: dict[Hashable, PressState], name: Hashable) -> PressState:
        with self._lock:
            return table.get(name, PressState.NONE)

    def set_key(self, key: Hashable, state: PressState) -> None:
        with self._lock:
            self._keys[key] = state

    def key_down(self, key: Hashable) -> bool:
        return self._state(self._keys, key) is PressState.PRESSED

    def key_held(self, key: Hashable) -> bool:
        return self._state(self._keys, key) is PressState.HELD

    def key(self, key: Hashable) -> bool:
        return self._state(self._keys, key) in (PressState.PRESSED, PressState.HELD)

    def key_up(self, key: Hashable) -> bool:
        return self._state(self._keys, key) is PressState.RELEASED

    def set_mouse_button(self, button: Hashable, state: PressState) -> None:
        with self._lock:
            self._buttons[button] = state

    def button_down(self, button: Hashable) -> bool:
        return self._state(self._buttons, button) is PressState.PRESSED

    def button_held(self, button: Hashable) -> bool:
        return self._state(self._buttons, button) is PressState.HELD

    def button(self, button: Hashable) -> bool:
        return self._state(self._buttons, button) in (PressState.PRESSED, PressState.HELD)

    def button_up(self, button: Hashable) -> bool:
        return self._state(self._buttons, button) is PressState.RELEASED

    def set_mouse_pos(self, x: float, y: float) -> None:
        with self._lock:
            self._mouse_pos = (float(x), float(y))

    def mouse_delta(self) -> tuple[float, float]:
        """Mouse movement measured by the last update."""
        with self._lock:
            return self._mouse_delta