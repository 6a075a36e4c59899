import os
from io import StringIO

import pytest

from grip.core import feed, getch, raw_mode, take_fed


def test_core_feed():
    feed("\x1b[<0;1;1M")

    assert take_fed() == "\x1b[<0;1;1M"
    assert take_fed() == ""


def test_core_getch_prefers_fed():
    feed("q")

    assert getch(StringIO()) == "q"


def test_core_getch_reads_available():
    read_fd, write_fd = os.pipe()

    with os.fdopen(read_fd, "r", encoding="utf-8") as stream:
        os.write(write_fd, "ab█".encode("utf-8"))
        assert getch(stream) == "ab█"

        os.close(write_fd)

        with pytest.raises(EOFError):
            getch(stream)


def test_core_raw_mode_ignores_non_tty():
    stream = StringIO()

    with raw_mode(stream):
        pass

    assert stream.getvalue() == ""
