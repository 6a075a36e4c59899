from io import StringIO

import pytest

from grip import Terminal, TerminalError, terminal
from grip.core import (
    CLEAR_SCREEN,
    END_ALT_BUFFER,
    END_BRACKETED_PASTE,
    END_FOCUS_REPORT,
    END_MOUSE_REPORT,
    HIDE_CURSOR,
    SHOW_CURSOR,
    START_ALT_BUFFER,
    START_BRACKETED_PASTE,
    START_FOCUS_REPORT,
    START_MOUSE_REPORT,
)


class BrokenStream(StringIO):
    def write(self, data: str) -> int:
        raise OSError("The terminal went away.")


def _make_terminal() -> Terminal:
    return Terminal(stream=StringIO(), input_stream=StringIO())


def test_terminal_write_control():
    stream = StringIO()

    term = Terminal(stream=stream)

    term.write_control("\x1b[H")
    assert stream.getvalue() == "\x1b[H"


def test_terminal_write():
    term = _make_terminal()

    assert term.write("X", cursor=(0, 0)) == 1
    assert term.write("yz") == 2
    term.move_cursor((9, 4))
    term.clear()

    assert term.stream.getvalue() == "\x1b[1;1HXyz\x1b[5;10H" + CLEAR_SCREEN


def test_terminal_errors():
    term = Terminal(stream=BrokenStream())

    with pytest.raises(TerminalError):
        term.write("X", cursor=(1, 1))

    with pytest.raises(TerminalError):
        term.set_report_mouse(True)


def test_terminal_interactive():
    term = _make_terminal()

    with term.interactive():
        assert term.stream.getvalue() == (
            START_FOCUS_REPORT
            + START_MOUSE_REPORT
            + START_BRACKETED_PASTE
            + START_ALT_BUFFER
            + HIDE_CURSOR
        )

        term.stream.truncate(0)
        term.stream.seek(0)

    assert term.stream.getvalue() == (
        END_ALT_BUFFER
        + SHOW_CURSOR
        + END_BRACKETED_PASTE
        + END_MOUSE_REPORT
        + END_FOCUS_REPORT
    )


def test_terminal_interactive_restores_on_error():
    term = _make_terminal()

    with pytest.raises(RuntimeError):
        with term.interactive():
            raise RuntimeError("Something broke mid-session.")

    assert term.stream.getvalue().endswith(
        END_ALT_BUFFER
        + SHOW_CURSOR
        + END_BRACKETED_PASTE
        + END_MOUSE_REPORT
        + END_FOCUS_REPORT
    )


def test_terminal_interactive_main_screen():
    term = _make_terminal()

    with term.interactive(alt_buffer=False):
        pass

    assert START_ALT_BUFFER not in term.stream.getvalue()


def test_terminal_size():
    term = Terminal()

    term._previous_size = (0, 0)

    resizes = []
    term.on_resize += resizes.append

    assert term.size == (term.width, term.height)
    assert resizes == [term.size]


def test_terminal_singleton():
    assert isinstance(terminal, Terminal)
