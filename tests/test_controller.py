from io import StringIO

import pytest

from grip import (
    Controller,
    DrawError,
    FocusEvent,
    KeyEvent,
    LoopState,
    MouseButton,
    MouseEvent,
    MouseKind,
    PasteEvent,
    PointerTracker,
    ResizeEvent,
    Shape,
    Terminal,
)
from grip.core import END_FOCUS_REPORT


class InkOnlyOnceStream(StringIO):
    """Accepts the first frame, then fails to draw anything else."""

    def __init__(self) -> None:
        super().__init__()
        self.frames = 0

    def flush(self) -> None:
        if "█" in self.getvalue():
            self.frames += 1

    def write(self, data: str) -> int:
        if "█" in data and self.frames > 0:
            raise OSError("The terminal went away.")

        return super().write(data)


def _drag(column: int, row: int) -> MouseEvent:
    return MouseEvent(MouseKind.DRAG, column, row, MouseButton.LEFT)


def _make_controller(anchored: bool = False) -> Controller:
    terminal = Terminal(stream=StringIO(), input_stream=StringIO())
    shape = Shape(20, 10, 10, 5)

    return Controller(terminal, shape, PointerTracker(anchored=anchored))


def test_controller_start_draws():
    controller = _make_controller()
    controller.start()

    output = controller.terminal.stream.getvalue()

    assert controller.state is LoopState.RUNNING
    assert output.startswith("\x1b[2J")
    assert output.count("█") == len(controller.shape.cells)
    assert output.endswith("\x1b[1;1H")


def test_controller_drags_from_edge():
    controller = _make_controller()

    # On the left edge, so nothing moves, but the pointer is still recorded.
    controller.handle(_drag(10, 10))
    assert controller.shape.position == (10, 5)
    assert controller.tracker.last_position == (10, 10)

    controller.handle(_drag(11, 10))
    assert controller.shape.position == (11, 5)


def test_controller_jumps_from_initial_pointer():
    controller = _make_controller()

    assert controller.handle(_drag(15, 8)) is LoopState.RUNNING
    assert controller.shape.position == (25, 13)

    # Checked against the new bounds, (25, 13) to (45, 23).
    controller.handle(_drag(17, 9))
    assert controller.shape.position == (25, 13)
    assert controller.tracker.last_position == (17, 9)


def test_controller_anchored_drag():
    controller = _make_controller(anchored=True)
    moves = []
    controller.on_move += moves.append

    controller.handle(MouseEvent(MouseKind.PRESS, 15, 8, MouseButton.LEFT))
    controller.handle(_drag(17, 9))
    controller.handle(_drag(18, 9))
    controller.handle(MouseEvent(MouseKind.RELEASE, 18, 9, MouseButton.LEFT))

    assert controller.shape.position == (13, 6)
    assert moves == [(12, 6), (13, 6)]


def test_controller_ignores_plain_motion():
    controller = _make_controller()

    controller.handle(MouseEvent(MouseKind.MOVE, 20, 10))

    assert controller.tracker.last_position == (0, 0)
    assert controller.terminal.stream.getvalue() == ""


def test_controller_redraws_only_inside():
    controller = _make_controller()

    controller.handle(MouseEvent(MouseKind.PRESS, 50, 50, MouseButton.LEFT))
    assert controller.terminal.stream.getvalue() == ""
    assert controller.tracker.last_position == (50, 50)

    controller.handle(MouseEvent(MouseKind.PRESS, 20, 10, MouseButton.LEFT))
    assert "█" in controller.terminal.stream.getvalue()
    assert controller.shape.position == (10, 5)


@pytest.mark.parametrize(
    "event",
    [KeyEvent("q", "q"), FocusEvent(gained=True), FocusEvent(gained=False)],
)
def test_controller_terminates(event):
    controller = _make_controller()

    assert controller.handle(event) is LoopState.TERMINATED
    assert controller.shape.position == (10, 5)

    # Nothing is handled after terminating.
    assert controller.handle(_drag(15, 8)) is LoopState.TERMINATED
    assert controller.shape.position == (10, 5)


def test_controller_resize_and_paste_keep_running():
    controller = _make_controller()
    resizes = []
    controller.terminal.on_resize += resizes.append

    controller.tracker.last_position = (3, 3)

    assert controller.handle(ResizeEvent(100, 30)) is LoopState.RUNNING
    assert controller.handle(PasteEvent("some text")) is LoopState.RUNNING

    assert resizes == [(100, 30)]
    assert controller.shape.position == (10, 5)
    assert controller.tracker.last_position == (3, 3)
    assert controller.terminal.stream.getvalue() == ""


def test_controller_rejects_unknown_events():
    controller = _make_controller()

    with pytest.raises(TypeError):
        controller.handle("not an event")


def test_controller_run():
    controller = _make_controller()

    events = [
        MouseEvent(MouseKind.MOVE, 3, 3),
        _drag(15, 8),
        KeyEvent("q", "q"),
        _drag(30, 20),
    ]

    assert controller.run(events) is LoopState.TERMINATED
    assert controller.shape.position == (25, 13)


def test_controller_run_until_input_ends():
    controller = _make_controller()

    assert controller.run([ResizeEvent(80, 24)]) is LoopState.TERMINATED


def test_controller_restores_terminal_on_draw_error():
    terminal = Terminal(stream=InkOnlyOnceStream(), input_stream=StringIO())
    controller = Controller(terminal, Shape(20, 10, 10, 5))

    with pytest.raises(DrawError):
        with terminal.interactive():
            controller.run([_drag(15, 8)])

    assert terminal.stream.getvalue().endswith(END_FOCUS_REPORT)


def test_controller_saturated_drag_is_not_a_move():
    terminal = Terminal(stream=StringIO(), input_stream=StringIO())
    controller = Controller(terminal, Shape(20, 10, 0, 0), PointerTracker(5, 5))
    moves = []
    controller.on_move += moves.append

    controller.handle(_drag(4, 5))

    assert controller.shape.position == (0, 0)
    assert moves == []
