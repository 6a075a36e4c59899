"""The Terminal class, which is the primary surface to interact with the emulator."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from shutil import get_terminal_size
from typing import Generator, TextIO

from .core import (
    CLEAR_SCREEN,
    END_ALT_BUFFER,
    END_BRACKETED_PASTE,
    END_FOCUS_REPORT,
    END_MOUSE_REPORT,
    HIDE_CURSOR,
    MOVE_CURSOR,
    SHOW_CURSOR,
    START_ALT_BUFFER,
    START_BRACKETED_PASTE,
    START_FOCUS_REPORT,
    START_MOUSE_REPORT,
    TerminalError,
    raw_mode,
)
from .event import Event
from .input import InputReader

__all__ = [
    "Terminal",
    "terminal",
]

logger = logging.getLogger(__name__)


@dataclass
class Terminal:
    """An object to read & write data to and from the terminal.

    Writes are queued on the output stream and only become visible once `flush` is
    called (or a write is made with `flush=True`), so a whole frame can be drawn
    with a single flush.
    """

    stream: TextIO = sys.stdout
    input_stream: TextIO = sys.stdin
    origin: tuple[int, int] = (1, 1)

    on_resize: Event[tuple[int, int]] = field(init=False)

    _previous_size: tuple[int, int] | None = None

    def __post_init__(self) -> None:
        self.on_resize = Event("terminal resized")

    @property
    def size(self) -> tuple[int, int]:
        """Returns the size (width, height) of the terminal.

        Querying the size also notices resizes, which are announced through
        `on_resize`.
        """

        size = tuple(get_terminal_size())

        if self._previous_size is not None and size != self._previous_size:
            self.on_resize(size)

        self._previous_size = size  # type: ignore

        return size  # type: ignore

    @property
    def width(self) -> int:
        """Returns the width of the terminal."""

        return self.size[0]

    @property
    def height(self) -> int:
        """Returns the height of the terminal."""

        return self.size[1]

    @contextmanager
    def alt_buffer(
        self, hide_cursor: bool = True
    ) -> Generator[None, None, None]:
        """Manages an alternate buffer in the terminal."""

        self.write_control(START_ALT_BUFFER)

        try:
            if hide_cursor:
                self.show_cursor(False)

            yield

        finally:
            self.write_control(END_ALT_BUFFER)

            if hide_cursor:
                self.show_cursor(True)

    @contextmanager
    def report_mouse(self) -> Generator[None, None, None]:
        """Sets mouse reporting for the duration of the context manager."""

        self.set_report_mouse(True)

        try:
            yield

        finally:
            self.set_report_mouse(False)

    @contextmanager
    def report_focus(self) -> Generator[None, None, None]:
        """Sets focus change reporting for the duration of the context manager."""

        self.set_report_focus(True)

        try:
            yield

        finally:
            self.set_report_focus(False)

    @contextmanager
    def bracketed_paste(self) -> Generator[None, None, None]:
        """Has pasted text wrapped in markers for the duration of the context."""

        self.set_bracketed_paste(True)

        try:
            yield

        finally:
            self.set_bracketed_paste(False)

    @contextmanager
    def raw(self) -> Generator[None, None, None]:  # no-cov
        """Puts the input side of the terminal into raw mode."""

        with raw_mode(self.input_stream):
            yield

    @contextmanager
    def interactive(self, alt_buffer: bool = True) -> Generator[None, None, None]:
        """Acquires every mode an interactive, mouse driven session needs.

        In order: raw input, focus reporting, mouse reporting, bracketed paste and
        the alternate buffer. They are released in reverse order when the context
        exits, whichever way it does. A mode failing to restore doesn't stop the
        others from being restored; its error is raised once they all ran.

        Args:
            alt_buffer: If unset, the session draws onto the main screen.
        """

        with ExitStack() as stack:
            stack.enter_context(self.raw())
            stack.enter_context(self.report_focus())
            stack.enter_context(self.report_mouse())
            stack.enter_context(self.bracketed_paste())

            if alt_buffer:
                stack.enter_context(self.alt_buffer())

            logger.debug("Entered interactive mode.")

            try:
                yield

            finally:
                logger.debug("Leaving interactive mode.")

    def events(self) -> InputReader:
        """Returns a reader for the events sent by this terminal."""

        return InputReader(self.input_stream)

    def show_cursor(self, value: bool = True) -> None:
        """Shows or hides the terminal's cursor."""

        if value:
            self.write_control(SHOW_CURSOR)

        else:
            self.write_control(HIDE_CURSOR)

    def set_report_mouse(self, value: bool = True) -> None:
        """Starts or stops listening to SGR 1006 mouse events."""

        if value:
            self.write_control(START_MOUSE_REPORT)

        else:
            self.write_control(END_MOUSE_REPORT)

    def set_report_focus(self, value: bool = True) -> None:
        """Starts or stops listening to focus gained/lost events."""

        if value:
            self.write_control(START_FOCUS_REPORT)

        else:
            self.write_control(END_FOCUS_REPORT)

    def set_bracketed_paste(self, value: bool = True) -> None:
        """Enables or disables bracketed paste."""

        if value:
            self.write_control(START_BRACKETED_PASTE)

        else:
            self.write_control(END_BRACKETED_PASTE)

    def clear(self, flush: bool = False) -> None:
        """Clears the whole screen.

        Args:
            flush: If set, the stream will be flushed after writing.
        """

        self.write_control(CLEAR_SCREEN, flush=flush)

    def move_cursor(self, cursor: tuple[int, int], flush: bool = False) -> None:
        """Moves the cursor to the given 0-based (x, y) position.

        Args:
            cursor: The location to move to, anchored to the top-left.
            flush: If set, the stream will be flushed after writing.
        """

        x, y = cursor
        column, row = x + self.origin[0], y + self.origin[1]

        self.write_control(MOVE_CURSOR.format(row=row, column=column), flush=flush)

    def write(
        self,
        data: str,
        cursor: tuple[int, int] | None = None,
        flush: bool = False,
    ) -> int:
        """Writes some text to the screen at the given cursor position.

        Args:
            data: The text to write.
            cursor: The location of the screen to start writing at, anchored to the
                top-left. If not given, the text is written wherever the cursor is.
            flush: If set, the stream will be flushed after writing.

        Returns:
            The number of characters written.
        """

        if cursor is not None:
            self.move_cursor(cursor)

        self.write_control(data, flush=flush)

        return len(data)

    def write_control(self, sequence: str, flush: bool = True) -> None:
        """Writes some control sequence to the terminal.

        Args:
            sequence: The control sequence to write.
            flush: If set, the stream will be flushed after writing.

        Raises:
            TerminalError: The stream refused the write.
        """

        try:
            self.stream.write(sequence)

        except (OSError, ValueError) as exc:
            raise TerminalError(f"Could not write {sequence!r} to terminal.") from exc

        if flush:
            self.flush()

    def flush(self) -> None:
        """Makes everything written so far visible.

        Raises:
            TerminalError: The stream could not be flushed.
        """

        try:
            self.stream.flush()

        except (OSError, ValueError) as exc:
            raise TerminalError("Could not flush terminal.") from exc


terminal = Terminal()
