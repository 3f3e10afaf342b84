import pytest

from cloudmark.camera_controller import CameraController, CameraMode, Key, MouseButton


class RecordingCamera:
    def __init__(self):
        self.calls = []

    def orbit_rotate(self, dx, dy):
        self.calls.append(("rotate", dx, dy))

    def orbit_pan(self, dx, dy):
        self.calls.append(("pan", dx, dy))

    def orbit_zoom(self, amount):
        self.calls.append(("zoom", amount))

    def process_mouse_movement(self, dx, dy):
        self.calls.append(("look", dx, dy))

    def process_mouse_scroll(self, amount):
        self.calls.append(("fov", amount))

    def process_keyboard(self, direction, delta_time):
        self.calls.append(("key", direction, delta_time))


def make(held=()):
    camera = RecordingCamera()
    held = set(held)
    return camera, CameraController(camera, lambda key: key in held)


def drag(controller, button, start, end):
    controller.on_mouse_button_pressed(button)
    controller.on_mouse_moved(*start)
    return controller.on_mouse_moved(*end)


def test_toggle_mode_round_trip():
    _, controller = make()
    assert controller.mode is CameraMode.ORBIT
    assert controller.toggle_mode() is CameraMode.FPS
    assert controller.toggle_mode() is CameraMode.ORBIT


def test_first_move_only_records_position():
    camera, controller = make()
    controller.on_mouse_button_pressed(MouseButton.LEFT)
    assert controller.on_mouse_moved(10.0, 10.0) is False
    assert camera.calls == []


def test_left_drag_rotates():
    camera, controller = make()
    assert drag(controller, MouseButton.LEFT, (0.0, 0.0), (3.0, -4.0)) is True
    assert camera.calls == [("rotate", 3.0, 4.0)]


def test_shift_left_drag_pans():
    camera, controller = make(held={Key.LEFT_SHIFT})
    drag(controller, MouseButton.LEFT, (0.0, 0.0), (3.0, -4.0))
    assert camera.calls == [("pan", 3.0, 4.0)]


def test_middle_drag_pans():
    camera, controller = make()
    drag(controller, MouseButton.MIDDLE, (0.0, 0.0), (3.0, -4.0))
    assert camera.calls == [("pan", 3.0, 4.0)]


def test_ctrl_left_drag_zooms():
    camera, controller = make(held={Key.RIGHT_CONTROL})
    drag(controller, MouseButton.LEFT, (0.0, 0.0), (0.0, -4.0))
    name, amount = camera.calls[0]
    assert name == "zoom"
    assert amount == pytest.approx(-4.0 * 0.1)


def test_right_drag_zooms_in_orbit():
    camera, controller = make()
    drag(controller, MouseButton.RIGHT, (0.0, 0.0), (0.0, 10.0))
    assert camera.calls[0][0] == "zoom"
    assert camera.calls[0][1] == pytest.approx(10.0 * 0.1)


def test_moves_without_buttons_do_nothing():
    camera, controller = make()
    controller.on_mouse_moved(0.0, 0.0)
    assert controller.on_mouse_moved(5.0, 5.0) is False
    assert camera.calls == []


def test_press_release_capture_state():
    _, controller = make()
    assert controller.is_capturing_input() is False
    assert controller.on_mouse_button_pressed(MouseButton.MIDDLE) is True
    assert controller.is_capturing_input() is True
    assert controller.on_mouse_button_released(MouseButton.MIDDLE) is True
    assert controller.is_capturing_input() is False


def test_unknown_button_is_ignored():
    _, controller = make()
    assert controller.on_mouse_button_pressed(7) is False
    assert controller.on_mouse_button_released(7) is False
    assert controller.is_capturing_input() is False


def test_pressing_again_resets_drag_origin():
    camera, controller = make()
    drag(controller, MouseButton.LEFT, (0.0, 0.0), (3.0, 3.0))
    controller.on_mouse_button_released(MouseButton.LEFT)
    controller.on_mouse_button_pressed(MouseButton.LEFT)
    controller.on_mouse_moved(100.0, 100.0)
    assert len(camera.calls) == 1


def test_scroll_in_each_mode():
    camera, controller = make()
    assert controller.on_mouse_scrolled(2.0) is True
    controller.toggle_mode()
    assert controller.on_mouse_scrolled(-1.0) is True
    assert camera.calls == [("zoom", 2.0), ("fov", -1.0)]


def test_fps_right_drag_looks_around():
    camera, controller = make()
    controller.mode = CameraMode.FPS
    drag(controller, MouseButton.RIGHT, (0.0, 0.0), (3.0, -4.0))
    assert camera.calls == [("look", 3.0, 4.0)]


def test_fps_left_drag_does_not_move_camera():
    camera, controller = make()
    controller.mode = CameraMode.FPS
    assert drag(controller, MouseButton.LEFT, (0.0, 0.0), (3.0, -4.0)) is True
    assert camera.calls == []


def test_keyboard_only_in_fps_mode():
    camera, controller = make(held={Key.W, Key.SPACE})
    controller.on_update(0.5)
    assert camera.calls == []
    controller.mode = CameraMode.FPS
    controller.on_update(0.5)
    assert camera.calls == [("key", "forward", 0.5), ("key", "up", 0.5)]


def test_keyboard_down_from_either_key():
    camera, controller = make(held={Key.Q, Key.LEFT_CONTROL})
    controller.mode = CameraMode.FPS
    controller.on_update(0.25)
    assert camera.calls == [("key", "down", 0.25)]