"""Terminal input events, and the machinery to decode them from raw sequences."""

from __future__ import annotations

import os
import re
import signal
import sys
from collections import deque
from dataclasses import dataclass
from enum import Enum
from select import select
from shutil import get_terminal_size
from types import TracebackType
from typing import Any, Callable, Iterator, TextIO, Union

from .core import _is_ready, getch, take_fed

__all__ = [
    "MouseKind",
    "MouseButton",
    "MouseEvent",
    "KeyEvent",
    "FocusEvent",
    "PasteEvent",
    "ResizeEvent",
    "InputEvent",
    "InputReader",
    "decode",
]

_MODIFIERS = (
    (4, "shift"),
    (8, "option"),
    (16, "ctrl"),
)

_MOTION_BIT = 32
_WHEEL_BIT = 64
_BUTTON_MASK = 0b11

RE_MOUSE = re.compile(r"\x1b\[<(\d+);(\d+);(\d+)([Mm])")
RE_ESCAPE_SEQUENCE = re.compile(r"\x1b(?:\[[0-9;?<]*[ -/]*[@-~]|O[@-~]|[^\x1b])?")

FOCUS_GAINED = "\x1b[I"
FOCUS_LOST = "\x1b[O"
PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

# Prefixes that could still turn into a longer sequence with the next read.
ESCAPE_PREFIXES = ("\x1b", "\x1b[")

# How long to wait for the rest of a sequence before taking a prefix as a key.
ESCAPE_TIMEOUT = 0.025

KEY_NAMES = {
    "\x1b": "escape",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[5~": "pageup",
    "\x1b[6~": "pagedown",
    "\x1b[Z": "shift-tab",
    "\x7f": "backspace",
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    " ": "space",
    "\x00": "ctrl-space",
    **{
        chr(i): f"ctrl-{chr(ord('a') + i - 1)}"
        for i in range(1, 27)
        if chr(i) not in "\t\r\n"
    },
}


class MouseKind(Enum):
    """The kind of pointer activity a `MouseEvent` reports."""

    PRESS = "press"
    """A button went down."""

    RELEASE = "release"
    """A button came back up."""

    DRAG = "drag"
    """The pointer moved while a button was held."""

    MOVE = "move"
    """The pointer moved with no buttons held."""

    SCROLL = "scroll"
    """A wheel was turned."""


class MouseButton(Enum):
    """The button involved in a `MouseEvent`."""

    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    NONE = "none"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    WHEEL_LEFT = "wheel_left"
    WHEEL_RIGHT = "wheel_right"


_BUTTONS = (MouseButton.LEFT, MouseButton.MIDDLE, MouseButton.RIGHT, MouseButton.NONE)
_WHEELS = (
    MouseButton.WHEEL_UP,
    MouseButton.WHEEL_DOWN,
    MouseButton.WHEEL_LEFT,
    MouseButton.WHEEL_RIGHT,
)


@dataclass(frozen=True)
class MouseEvent:
    """A pointer report, with 0-based cell coordinates."""

    kind: MouseKind
    column: int
    row: int
    button: MouseButton = MouseButton.NONE
    modifiers: frozenset[str] = frozenset()

    @property
    def position(self) -> tuple[int, int]:
        """Returns the (column, row) the event happened at."""

        return self.column, self.row


@dataclass(frozen=True)
class KeyEvent:
    """A key press.

    `key` is the canonical name of the key if it has one (`up`, `ctrl-c`), otherwise
    the literal characters that were sent.
    """

    key: str
    sequence: str = ""


@dataclass(frozen=True)
class FocusEvent:
    """The terminal window gained or lost focus."""

    gained: bool


@dataclass(frozen=True)
class PasteEvent:
    """Text pasted while bracketed paste was enabled."""

    text: str


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal changed size."""

    width: int
    height: int


InputEvent = Union[MouseEvent, KeyEvent, FocusEvent, PasteEvent, ResizeEvent]


def parse_mouse_event(code: str) -> MouseEvent | None:
    """Parses an SGR (1006) mouse report.

    Args:
        code: The event sequence sent by the terminal, formatted as
            `\\x1b[<{button};{column};{row}{M|m}`, where `M` is a press and `m` is a
            release. Coordinates are 1-based.

    Returns:
        None if the code cannot be parsed as a mouse event, otherwise the decoded
        event, with coordinates made 0-based.
    """

    mtch = RE_MOUSE.fullmatch(code)

    if mtch is None:
        return None

    return _mouse_from_match(mtch)


def _mouse_from_match(mtch: re.Match[str]) -> MouseEvent:
    """Builds the event described by a match of `RE_MOUSE`."""

    code_str, column, row, final = mtch.groups()
    value = int(code_str)

    modifiers = frozenset(name for bit, name in _MODIFIERS if value & bit)
    index = value & _BUTTON_MASK

    if value & _WHEEL_BIT:
        kind = MouseKind.SCROLL
        button = _WHEELS[index]

    elif value & _MOTION_BIT:
        button = _BUTTONS[index]
        kind = MouseKind.MOVE if button is MouseButton.NONE else MouseKind.DRAG

    else:
        button = _BUTTONS[index]
        kind = MouseKind.PRESS if final == "M" else MouseKind.RELEASE

    return MouseEvent(
        kind=kind,
        column=max(int(column) - 1, 0),
        row=max(int(row) - 1, 0),
        button=button,
        modifiers=modifiers,
    )


def _parse_key(sequence: str) -> KeyEvent:
    """Names a key sequence, if it can."""

    if sequence in KEY_NAMES:
        return KeyEvent(KEY_NAMES[sequence], sequence)

    # Alt + key comes in as an escape prefix.
    if len(sequence) == 2 and sequence[0] == "\x1b":
        inner = KEY_NAMES.get(sequence[1], sequence[1])
        return KeyEvent(f"alt-{inner}", sequence)

    return KeyEvent(sequence, sequence)


def decode(sequence: str) -> list[InputEvent]:
    """Splits a chunk of terminal input into the events it contains.

    Terminals regularly deliver multiple reports in a single read (think of a fast
    mouse drag), so this walks the whole chunk instead of looking at its tail.

    Args:
        sequence: The raw characters read from the terminal.

    Returns:
        The events, in the order they were sent.
    """

    events: list[InputEvent] = []
    i = 0

    while i < len(sequence):
        if sequence.startswith(PASTE_START, i):
            start = i + len(PASTE_START)
            end = sequence.find(PASTE_END, start)

            if end == -1:
                events.append(PasteEvent(sequence[start:]))
                break

            events.append(PasteEvent(sequence[start:end]))
            i = end + len(PASTE_END)
            continue

        if sequence.startswith(FOCUS_GAINED, i) or sequence.startswith(FOCUS_LOST, i):
            events.append(FocusEvent(gained=sequence[i + 2] == "I"))
            i += len(FOCUS_GAINED)
            continue

        if (mtch := RE_MOUSE.match(sequence, i)) is not None:
            events.append(_mouse_from_match(mtch))
            i = mtch.end()
            continue

        if sequence[i] == "\x1b":
            mtch = RE_ESCAPE_SEQUENCE.match(sequence, i)
            end = i + 1 if mtch is None else mtch.end()

            events.append(_parse_key(sequence[i:end]))
            i = end
            continue

        events.append(_parse_key(sequence[i]))
        i += 1

    return events


def _split_incomplete(sequence: str) -> tuple[str, str]:
    """Holds back a trailing sequence that was cut in half by a read.

    This covers mouse reports, pastes, and a lone `\\x1b` or `\\x1b[` at the very
    end, which may be the start of either.

    Returns:
        The decodable head, and the remainder to prepend to the next read.
    """

    paste = sequence.rfind(PASTE_START)
    if paste != -1 and sequence.find(PASTE_END, paste) == -1:
        return sequence[:paste], sequence[paste:]

    last = sequence.rfind("\x1b[<")
    if last != -1 and RE_MOUSE.match(sequence, last) is None:
        tail = sequence[last + 3 :]

        if all(char.isdigit() or char == ";" for char in tail):
            return sequence[:last], sequence[last:]

    for prefix in ESCAPE_PREFIXES:
        if sequence.endswith(prefix):
            return sequence[: -len(prefix)], prefix

    return sequence, ""


class InputReader:
    """A blocking source of `InputEvent`-s read from a terminal's input stream.

    Resizes are delivered by the kernel as `SIGWINCH`, which the reader turns into a
    byte on an internal pipe so that the blocking wait can be woken up by it. The
    signal handler is only installed while the reader is used as a context manager;
    outside of one, the reader still works but never reports resizes.
    """

    def __init__(
        self,
        stream: TextIO = sys.stdin,
        get_size: Callable[[], tuple[int, int]] = get_terminal_size,
    ) -> None:
        self.stream = stream
        self.get_size = get_size

        self._pending: deque[InputEvent] = deque()
        self._remainder = ""
        self._wakeup: tuple[int, int] | None = None
        self._previous_handler: Any = None
        self._closed = False

    def __enter__(self) -> InputReader:
        read_fd, write_fd = os.pipe()
        os.set_blocking(write_fd, False)

        self._wakeup = read_fd, write_fd
        self._previous_handler = signal.signal(signal.SIGWINCH, self._on_winch)

        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._wakeup is None:
            return

        signal.signal(signal.SIGWINCH, self._previous_handler or signal.SIG_DFL)

        for descriptor in self._wakeup:
            os.close(descriptor)

        self._wakeup = None

    def __iter__(self) -> Iterator[InputEvent]:
        """Yields events forever, or until the stream is closed."""

        while True:
            try:
                yield self.read()

            except EOFError:
                return

    def _on_winch(self, signum: int, frame: Any) -> None:
        if self._wakeup is None:
            return

        try:
            os.write(self._wakeup[1], b"\0")

        # The pipe is full, so a wakeup is already pending.
        except BlockingIOError:
            pass

    def _drain_wakeup(self, descriptor: int) -> None:
        try:
            os.read(descriptor, 1024)

        except BlockingIOError:
            pass

    def _fill(self) -> None:
        """Blocks until at least one event could be queued."""

        if self._closed:
            raise EOFError("The input stream has been closed.")

        if fed := take_fed():
            self._queue(fed)
            self._settle()
            return

        watched: list[Any] = [self.stream]
        if self._wakeup is not None:
            watched.append(self._wakeup[0])

        ready, _, _ = select(watched, [], [])

        if self._wakeup is not None and self._wakeup[0] in ready:
            self._drain_wakeup(self._wakeup[0])
            self._pending.append(ResizeEvent(*self.get_size()))

        if self.stream in ready:
            try:
                self._queue(getch(self.stream))
                self._settle()

            except EOFError:
                self._closed = True
                self._flush_remainder()

                if not self._pending:
                    raise

    def _queue(self, text: str) -> None:
        head, self._remainder = _split_incomplete(self._remainder + text)
        self._pending.extend(decode(head))

    def _flush_remainder(self) -> None:
        self._pending.extend(decode(self._remainder))
        self._remainder = ""

    def _settle(self) -> None:
        """Gives a trailing escape prefix a moment to be completed.

        If nothing else arrives in time, it was a key press on its own.
        """

        if self._remainder not in ESCAPE_PREFIXES:
            return

        if not _is_ready(self.stream, ESCAPE_TIMEOUT):
            self._flush_remainder()

    def read(self) -> InputEvent:
        """Returns the next event, blocking until one is available.

        Raises:
            EOFError: The input stream has been closed and no events are left.
        """

        while not self._pending:
            self._fill()

        return self._pending.popleft()
