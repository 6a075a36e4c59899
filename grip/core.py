"""A set of non-object specific terminal API implementations.

Most of these are best used from the `Terminal` object.
"""

from __future__ import annotations

import os
import sys
from codecs import getincrementaldecoder
from contextlib import contextmanager
from io import StringIO
from select import select
from typing import IO, AnyStr, Callable, Generator, TextIO

try:
    import termios
    import tty

except ImportError:  # no-cov
    raise NotImplementedError(f"Platform {os.name!r} is not supported.") from None

__all__ = [
    "TerminalError",
    "feed",
    "getch",
    "raw_mode",
    "take_fed",
]

START_ALT_BUFFER = "\x1b[?1049h"
END_ALT_BUFFER = "\x1b[?1049l"
SHOW_CURSOR = "\x1b[?25h"
HIDE_CURSOR = "\x1b[?25l"
CLEAR_SCREEN = "\x1b[2J"
MOVE_CURSOR = "\x1b[{row};{column}H"

# Press/release (1000), button-motion (1002) and any-motion (1003) tracking,
# reported with the SGR (1006) encoding.
START_MOUSE_REPORT = "\x1b[?1000h\x1b[?1002h\x1b[?1003h\x1b[?1006h"
END_MOUSE_REPORT = "\x1b[?1006l\x1b[?1003l\x1b[?1002l\x1b[?1000l"

START_FOCUS_REPORT = "\x1b[?1004h"
END_FOCUS_REPORT = "\x1b[?1004l"

START_BRACKETED_PASTE = "\x1b[?2004h"
END_BRACKETED_PASTE = "\x1b[?2004l"

feeder_stream = StringIO()


class TerminalError(Exception):
    """Raised when an operation on the terminal (write, flush, mode toggle) failed."""


def _is_ready(file: IO[AnyStr], duration: float = 0.0) -> bool:  # no-cov
    """Determines if IO object is ready to read.

    Args:
        file: An IO object of any type.
        duration: How long to wait for the object to become ready, in seconds.

    Returns:
        A boolean describing whether the object has unread
        content.
    """

    result = select([file], [], [], duration)
    return len(result[0]) > 0


def _get_decoder(stream: TextIO) -> Callable[[bytes], str]:
    """Returns an incremental decoder matching the stream's encoding."""

    encoding = getattr(stream, "encoding", None) or "utf-8"
    decoder = getincrementaldecoder(encoding)(errors="replace")

    return decoder.decode


def feed(text: str) -> None:
    """Feeds some text to be read by `getch`.

    This can be used to manually "interrupt" an ongoing read loop, as fed content
    is always returned before the stream is consulted.
    """

    feeder_stream.write(text)
    feeder_stream.seek(0)


def take_fed() -> str:
    """Returns & forgets everything given to `feed` so far."""

    content = feeder_stream.getvalue()

    if content:
        feeder_stream.truncate(0)
        feeder_stream.seek(0)

    return content


def getch(stream: TextIO = sys.stdin) -> str:  # no-cov
    """Gets the maximum-length sequence of characters that could be read.

    This blocks until at least one byte is available. The terminal's input mode is
    left untouched, so callers wanting keys as they are typed should be inside
    `raw_mode`.

    Args:
        stream: The stream to read from. Defaults to `sys.stdin`.

    Raises:
        EOFError: The stream has been closed on the other end.
    """

    if fed_content := take_fed():
        return fed_content

    decode = _get_decoder(stream)
    descriptor = stream.fileno()

    def _read() -> str:
        """Reads characters until at least one could be decoded."""

        buff = ""

        while not buff:
            char = os.read(descriptor, 1)

            if char == b"":
                raise EOFError(f"Stream {stream!r} has been closed.")

            buff += decode(char)

        return buff

    buff = _read()

    while _is_ready(stream):
        # The closed stream is reported on the next call.
        try:
            buff += _read()

        except EOFError:
            break

    return buff


@contextmanager
def raw_mode(stream: TextIO = sys.stdin) -> Generator[None, None, None]:  # no-cov
    """Puts the terminal attached to the stream into raw mode for the context.

    Keystrokes are delivered unprocessed; no line buffering, echo or signal
    generation. Streams that aren't TTYs are left alone.
    """

    if not stream.isatty():
        yield
        return

    descriptor = stream.fileno()

    try:
        old_settings = termios.tcgetattr(descriptor)
        tty.setraw(descriptor, termios.TCSANOW)

    except termios.error as exc:
        raise TerminalError("Could not enter raw mode.") from exc

    try:
        yield

    finally:
        try:
            termios.tcsetattr(descriptor, termios.TCSADRAIN, old_settings)

        except termios.error as exc:
            raise TerminalError("Could not restore terminal mode.") from exc
