"""Mouse and keyboard handling for orbit and first-person camera navigation."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

_DRAG_ZOOM_SCALE = 0.1


class CameraMode(enum.Enum):
    """Navigation style of the camera."""

    ORBIT = "orbit"
    FPS = "fps"


class MouseButton(enum.IntEnum):
    LEFT = 0
    RIGHT = 1
    MIDDLE = 2


class Key(enum.Enum):
    """Keys the controller looks at."""

    W = enum.auto()
    A = enum.auto()
    S = enum.auto()
    D = enum.auto()
    E = enum.auto()
    Q = enum.auto()
    SPACE = enum.auto()
    LEFT_SHIFT = enum.auto()
    RIGHT_SHIFT = enum.auto()
    LEFT_CONTROL = enum.auto()
    RIGHT_CONTROL = enum.auto()


_MOVEMENT_KEYS: tuple[tuple[str, tuple[Key, ...]], ...] = (
    ("forward", (Key.W,)),
    ("backward", (Key.S,)),
    ("left", (Key.A,)),
    ("right", (Key.D,)),
    ("up", (Key.E, Key.SPACE)),
    ("down", (Key.Q, Key.LEFT_CONTROL)),
)


class CameraController:
    """Turns mouse drags, scrolls and held keys into camera movements.

    ``camera`` provides ``orbit_rotate``, ``orbit_pan``, ``orbit_zoom``,
    ``process_mouse_movement``, ``process_mouse_scroll`` and
    ``process_keyboard(direction, delta_time)``, where direction is one of
    ``"forward"``, ``"backward"``, ``"left"``, ``"right"``, ``"up"``, ``"down"``.
    ``is_key_pressed`` reports whether a :class:`Key` is held.
    """

    def __init__(self, camera, is_key_pressed: Callable[[Key], bool] | None = None) -> None:
        self.camera = camera
        self._is_key_pressed = is_key_pressed or (lambda key: False)
        self.mode = CameraMode.ORBIT
        self._pressed: set[MouseButton] = set()
        self._first_mouse = True
        self._last_x = 0.0
        self._last_y = 0.0

    def _any_pressed(self, *keys: Key) -> bool:
        return any(self._is_key_pressed(key) for key in keys)

    def toggle_mode(self) -> CameraMode:
        self.mode = CameraMode.FPS if self.mode is CameraMode.ORBIT else CameraMode.ORBIT
        logger.info("Switched to %s camera mode", "FPS" if self.mode is CameraMode.FPS else "Orbit")
        return self.mode

    def on_update(self, delta_time: float) -> None:
        """Apply held movement keys; only active in FPS mode."""
        if self.mode is not CameraMode.FPS:
            return
        for direction, keys in _MOVEMENT_KEYS:
            if self._any_pressed(*keys):
                self.camera.process_keyboard(direction, delta_time)

    def is_capturing_input(self) -> bool:
        return bool(self._pressed)

    def on_mouse_button_pressed(self, button) -> bool:
        try:
            button = MouseButton(button)
        except ValueError:
            return False
        self._pressed.add(button)
        self._first_mouse = True
        logger.debug("%s mouse pressed", button.name.title())
        return True

    def on_mouse_button_released(self, button) -> bool:
        try:
            button = MouseButton(button)
        except ValueError:
            return False
        self._pressed.discard(button)
        logger.debug("%s mouse released", button.name.title())
        return True

    def on_mouse_moved(self, x: float, y: float) -> bool:
        """Move the camera by the drag since the last event; return whether a button is held."""
        if self._first_mouse:
            self._last_x, self._last_y = x, y
            self._first_mouse = False
            return False

        x_offset = x - self._last_x
        y_offset = self._last_y - y

        left = MouseButton.LEFT in self._pressed
        middle = MouseButton.MIDDLE in self._pressed
        right = MouseButton.RIGHT in self._pressed

        if self.mode is CameraMode.ORBIT:
            shift = self._any_pressed(Key.LEFT_SHIFT, Key.RIGHT_SHIFT)
            ctrl = self._any_pressed(Key.LEFT_CONTROL, Key.RIGHT_CONTROL)
            if right or (left and ctrl):
                self.camera.orbit_zoom(-y_offset * _DRAG_ZOOM_SCALE)
                logger.debug("Zooming: offset(%.2f)", y_offset)
            elif middle or (left and shift):
                self.camera.orbit_pan(x_offset, y_offset)
                logger.debug("Panning: offset(%.2f, %.2f)", x_offset, y_offset)
            elif left:
                self.camera.orbit_rotate(x_offset, y_offset)
                logger.debug("Rotating: offset(%.2f, %.2f)", x_offset, y_offset)
        elif right:
            self.camera.process_mouse_movement(x_offset, y_offset)

        self._last_x, self._last_y = x, y
        return self.is_capturing_input()

    def on_mouse_scrolled(self, y_offset: float) -> bool:
        if self.mode is CameraMode.ORBIT:
            self.camera.orbit_zoom(y_offset)
            logger.debug("Orbit zoom: %.2f", y_offset)
        else:
            self.camera.process_mouse_scroll(y_offset)
            logger.debug("FPS zoom (FOV): %.2f", y_offset)
        return True